"""Tests for taskn.interactive.events: key decoding and the merged event queue."""

from __future__ import annotations

import os
import threading

import pytest

from taskn.errors import InputClosed
from taskn.interactive.events import (
    CTRL_C,
    DOWN,
    ENTER,
    ESC,
    UP,
    Event,
    EventKind,
    EventSource,
    KeyDecoder,
    decode_keys,
    read_keys,
)


class TestDecodeKeys:
    def test_printable(self):
        assert decode_keys("sd") == ["s", "d"]

    def test_arrows(self):
        assert decode_keys("\x1b[A\x1b[B") == [UP, DOWN]

    def test_application_mode_arrows(self):
        assert decode_keys("\x1bOA\x1bOB") == [UP, DOWN]

    def test_lone_escape(self):
        assert decode_keys("\x1b") == [ESC]

    def test_escape_followed_by_key(self):
        assert decode_keys("\x1bq") == [ESC, "q"]

    def test_control_keys(self):
        assert decode_keys("\r\n\x03") == [ENTER, ENTER, CTRL_C]

    def test_unknown_csi_dropped(self):
        # F5 is ESC [ 1 5 ~
        assert decode_keys("a\x1b[15~b") == ["a", "b"]

    def test_unicode(self):
        assert decode_keys("é") == ["é"]

    def test_left_right_arrows_dropped(self):
        assert decode_keys("\x1b[C\x1bODk") == ["k"]


class TestKeyDecoder:
    @pytest.mark.parametrize("head,tail", [("\x1b", "[A"), ("\x1b[", "A"), ("\x1bO", "A")])
    def test_sequence_split_across_chunks(self, head, tail):
        decoder = KeyDecoder()
        assert decoder.feed("s" + head) == ["s"]
        assert decoder.feed(tail) == [UP]
        assert decoder.pending == ""

    def test_split_sequence_in_reorder_is_a_move_not_a_cancel(self):
        decoder = KeyDecoder()
        keys = decoder.feed("\x1b[") + decoder.feed("A")
        assert ESC not in keys

    def test_flush_turns_held_escape_into_esc(self):
        decoder = KeyDecoder()
        assert decoder.feed("\x1b") == []
        assert decoder.flush() == [ESC]
        assert decoder.flush() == []

    def test_flush_drops_partial_sequence(self):
        decoder = KeyDecoder()
        decoder.feed("\x1b[1")
        assert decoder.flush() == []


def _producer(events: list[Event], gate: threading.Event | None = None):
    def run(push):
        if gate is not None:
            gate.wait(timeout=5)
        for event in events:
            push(event)
        threading.Event().wait()  # producers never return on their own

    return run


class TestEventSource:
    def test_single_producer_order_preserved(self):
        source = EventSource([_producer([Event.key_press("a"), Event.resize(), Event.key_press("b")])]).start()
        got = [source.next() for _ in range(3)]
        assert got == [Event.key_press("a"), Event.resize(), Event.key_press("b")]

    def test_two_producers_merge(self):
        gate = threading.Event()
        keys = _producer([Event.key_press("x")])
        resizes = _producer([Event.resize()], gate)
        source = EventSource([keys, resizes]).start()

        first = source.next()
        gate.set()
        second = source.next()

        assert first == Event.key_press("x")
        assert second.kind is EventKind.RESIZE

    def test_producer_failure_raises_in_consumer(self):
        def broken(push):
            raise OSError("device gone")

        source = EventSource([broken]).start()
        with pytest.raises(InputClosed, match="device gone"):
            source.next()

    def test_no_producers_is_allowed(self):
        source = EventSource([]).start()
        assert source._threads == []


class TestReadKeys:
    def test_reads_until_eof(self):
        r, w = os.pipe()
        try:
            os.write(w, b"j\x1b[A\r")
            os.close(w)
            source = EventSource([lambda push: read_keys(push, fd=r)]).start()

            assert source.next() == Event.key_press("j")
            assert source.next() == Event.key_press(UP)
            assert source.next() == Event.key_press(ENTER)
            with pytest.raises(InputClosed):
                source.next()
        finally:
            os.close(r)

    def test_arrow_split_across_writes(self):
        r, w = os.pipe()
        try:
            source = EventSource([lambda push: read_keys(push, fd=r)]).start()
            os.write(w, b"\x1b[")
            os.write(w, b"A")
            assert source.next() == Event.key_press(UP)
        finally:
            os.close(w)
        with pytest.raises(InputClosed):
            source.next()
        os.close(r)

    def test_lone_escape_delivered_after_delay(self):
        r, w = os.pipe()
        try:
            source = EventSource([lambda push: read_keys(push, fd=r)]).start()
            os.write(w, b"\x1b")
            assert source.next() == Event.key_press(ESC)
        finally:
            os.close(w)
        with pytest.raises(InputClosed):
            source.next()
        os.close(r)

    def test_multibyte_split_across_reads(self):
        received: list[Event] = []
        r, w = os.pipe()
        try:
            encoded = "ü".encode()
            os.write(w, encoded[:1])
            os.write(w, encoded[1:])
            os.close(w)
            with pytest.raises(InputClosed):
                read_keys(received.append, fd=r)
        finally:
            os.close(r)
        assert received == [Event.key_press("ü")]
