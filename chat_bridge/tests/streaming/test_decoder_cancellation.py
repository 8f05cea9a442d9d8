"""Cancellation and failure semantics of the event-stream decoder.

Cancellation is observed immediately before each chunk read. It is a normal
end (no exception) and always releases the source. A transport failure is
raised after the increments already delivered.
"""
from __future__ import annotations

import threading

import httpx
import pytest

from chat_bridge.base.cancellation import CancellationToken
from chat_bridge.base.errors import ErrorCode, StreamTransportError
from chat_bridge.base.models import StreamOutcome
from chat_bridge.streaming import decode
from chat_bridge.tests.helpers import DONE, FakeSource, delta_frame


def test_cancel_before_first_chunk_reads_nothing():
    token = CancellationToken()
    token.cancel("user")
    source = FakeSource([delta_frame("Hel"), DONE])
    decoder = decode(source, token)

    assert list(decoder) == []  # nosec B101 - pytest assert in tests
    assert source.pulled == 0 and source.closed  # nosec B101 - pytest assert in tests
    assert decoder.outcome is StreamOutcome.CANCELLED and decoder.error is None  # nosec B101 - pytest assert in tests


def test_cancel_mid_stream_stops_before_next_read():
    token = CancellationToken()
    source = FakeSource([delta_frame("Hel"), delta_frame("lo"), DONE])
    decoder = decode(source, token)

    out = []
    for text in decoder:
        out.append(text)
        token.cancel("user")

    assert out == ["Hel"]  # nosec B101 - pytest assert in tests
    assert source.pulled == 1 and source.closed  # nosec B101 - pytest assert in tests
    assert decoder.outcome is StreamOutcome.CANCELLED  # nosec B101 - pytest assert in tests


def test_cancel_does_not_preempt_chunk_already_received():
    token = CancellationToken()
    source = FakeSource([delta_frame("a") + delta_frame("b"), delta_frame("c"), DONE])
    out = []
    for text in decode(source, token):
        out.append(text)
        token.cancel()
    assert out == ["a", "b"]  # nosec B101 - pytest assert in tests


def test_cancel_from_another_thread_during_blocked_read():
    token = CancellationToken()
    reading = threading.Event()
    release = threading.Event()

    class _SlowSource(FakeSource):
        def __iter__(self):
            yield delta_frame("first")
            reading.set()
            release.wait(5)
            yield delta_frame("second")
            yield DONE

    source = _SlowSource([])
    decoder = decode(source, token)
    out = []
    consumer = threading.Thread(target=lambda: out.extend(decoder))
    consumer.start()

    assert reading.wait(5)  # nosec B101 - pytest assert in tests
    token.cancel("host")
    release.set()
    consumer.join(5)

    # the in-flight read completes; cancellation is observed before the next one
    assert out == ["first", "second"]  # nosec B101 - pytest assert in tests
    assert decoder.outcome is StreamOutcome.CANCELLED and source.closed  # nosec B101 - pytest assert in tests


def test_consumer_abandoning_iteration_releases_source():
    source = FakeSource([delta_frame("a"), delta_frame("b"), DONE])
    decoder = decode(source)
    it = iter(decoder)
    assert next(it) == "a"  # nosec B101 - pytest assert in tests
    it.close()
    assert source.closed  # nosec B101 - pytest assert in tests
    assert decoder.outcome is StreamOutcome.CANCELLED  # nosec B101 - pytest assert in tests


def test_cancel_after_sentinel_keeps_sentinel_outcome():
    token = CancellationToken()
    decoder = decode(FakeSource([delta_frame("a"), DONE]), token)
    list(decoder)
    token.cancel()
    assert decoder.outcome is StreamOutcome.SENTINEL  # nosec B101 - pytest assert in tests


def test_transport_failure_after_increments_propagates():
    failure = StreamTransportError(code=ErrorCode.TRANSIENT, message="connection reset")
    source = FakeSource([delta_frame("a"), delta_frame("b")], fail_at=1, error=failure)
    decoder = decode(source)

    out = []
    with pytest.raises(StreamTransportError) as ei:
        for text in decoder:
            out.append(text)

    assert out == ["a"]  # nosec B101 - pytest assert in tests
    assert ei.value is failure and decoder.error is failure  # nosec B101 - pytest assert in tests
    assert decoder.outcome is StreamOutcome.FAILED and source.closed  # nosec B101 - pytest assert in tests


def test_raw_httpx_error_is_normalized():
    source = FakeSource([delta_frame("a")], fail_at=1, error=httpx.ReadError("peer reset"))
    decoder = decode(source)
    with pytest.raises(StreamTransportError) as ei:
        list(decoder)
    assert ei.value.code is ErrorCode.TRANSIENT  # nosec B101 - pytest assert in tests
    assert isinstance(ei.value.raw, httpx.ReadError)  # nosec B101 - pytest assert in tests
    assert decoder.metrics.emitted == 1  # nosec B101 - pytest assert in tests


def test_timeout_is_classified():
    source = FakeSource([], fail_at=0, error=httpx.ReadTimeout("idle"))
    with pytest.raises(StreamTransportError) as ei:
        list(decode(source))
    assert ei.value.code is ErrorCode.TIMEOUT  # nosec B101 - pytest assert in tests


def test_unexpected_source_error_fails_the_stream():
    source = FakeSource([delta_frame("a"), delta_frame("b")], fail_at=1, error=RuntimeError("source exploded"))
    decoder = decode(source)
    out = []
    with pytest.raises(StreamTransportError) as ei:
        for text in decoder:
            out.append(text)
    assert out == ["a"]  # nosec B101 - pytest assert in tests
    assert isinstance(ei.value.raw, RuntimeError)  # nosec B101 - pytest assert in tests
    assert isinstance(ei.value.__cause__, RuntimeError)  # nosec B101 - pytest assert in tests
    assert decoder.outcome is StreamOutcome.FAILED and decoder.error is ei.value  # nosec B101 - pytest assert in tests
    assert source.closed  # nosec B101 - pytest assert in tests
