"""Incremental decoder for server-sent-event streams.

All streaming backends deliver JSON payloads framed as server-sent events
(``data: {...}`` lines separated by blank lines). The decoder owns the
byte buffer and a cursor into it, so it can be fed reads of any size and
split at any byte offset without a live socket.
"""

import json
import logging
from typing import Any

logger = logging.getLogger(__name__)


class _Done:
    """Sentinel for the ``data: [DONE]`` terminator."""

    def __repr__(self) -> str:
        return "DONE"


DONE = _Done()


class SSEDecoder:
    """Turn a byte stream into decoded JSON payloads.

    ``feed`` returns every unit completed by the new bytes. Incomplete
    lines stay buffered until the next read. Malformed units are skipped.
    Lines that hold a bare JSON document (newline-delimited JSON) are also
    accepted.
    """

    def __init__(self) -> None:
        self._buffer = bytearray()
        self._cursor = 0
        self._data_lines: list[bytes] = []

    @property
    def pending(self) -> int:
        """Number of buffered bytes not yet consumed."""
        return len(self._buffer) - self._cursor

    def feed(self, chunk: bytes) -> list[Any]:
        """Append ``chunk`` and return the units it completes."""
        self._buffer.extend(chunk)
        units: list[Any] = []

        while True:
            newline = self._buffer.find(b"\n", self._cursor)
            if newline == -1:
                break
            line = bytes(self._buffer[self._cursor:newline])
            self._cursor = newline + 1
            self._consume_line(line, units)

        # Compact once the consumed prefix is no longer needed
        if self._cursor:
            del self._buffer[: self._cursor]
            self._cursor = 0

        return units

    def flush(self) -> list[Any]:
        """Decode whatever remains once the stream has ended."""
        units: list[Any] = []
        if self.pending:
            line = bytes(self._buffer[self._cursor:])
            self._buffer.clear()
            self._cursor = 0
            self._consume_line(line, units)
        self._dispatch(units)
        return units

    def _consume_line(self, line: bytes, units: list[Any]) -> None:
        line = line.rstrip(b"\r")

        if not line.strip():
            # Blank line ends the current event
            self._dispatch(units)
            return

        if line.startswith(b":"):
            return  # comment / keep-alive

        field, _, value = line.partition(b":")
        if field == b"data":
            self._data_lines.append(value[1:] if value.startswith(b" ") else value)
            return

        if field in (b"event", b"id", b"retry"):
            return

        stripped = line.strip()
        if stripped.startswith((b"{", b"[")):
            self._dispatch(units)
            unit = self._decode(stripped)
            if unit is not None:
                units.append(unit)
            return

        logger.debug("Skipping unrecognized stream line: %r", line[:80])

    def _dispatch(self, units: list[Any]) -> None:
        if not self._data_lines:
            return
        payload = b"\n".join(self._data_lines).strip()
        self._data_lines = []
        if payload == b"[DONE]":
            units.append(DONE)
            return
        unit = self._decode(payload)
        if unit is not None:
            units.append(unit)

    @staticmethod
    def _decode(payload: bytes) -> Any | None:
        try:
            return json.loads(payload.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            logger.debug("Skipping malformed stream unit: %r", payload[:80])
            return None
