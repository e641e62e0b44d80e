"""Line-oriented pipe reader that forwards live lines and keeps the full text."""

from __future__ import annotations

import logging
import threading
from typing import IO

from solverpack.core.models import CapturedStream
from solverpack.events import LOG_OUTPUT_EVENT, Event, EventSink, publish_quietly

logger = logging.getLogger(__name__)


def _decode_line(raw: bytes | str, encoding: str) -> str:
    text = raw.decode(encoding, errors="replace") if isinstance(raw, bytes) else raw
    if text.endswith("\n"):
        text = text[:-1]
    if text.endswith("\r"):
        text = text[:-1]
    return text


def read_stream(
    stream: IO[bytes],
    *,
    name: str,
    sink: EventSink | None = None,
    encoding: str = "utf-8",
) -> CapturedStream:
    """Drain ``stream`` until EOF, publishing every line as it arrives.

    A read error ends the capture early; lines read so far are kept.
    """
    lines: list[str] = []
    error: str | None = None
    try:
        while True:
            raw = stream.readline()
            if not raw:
                break
            line = _decode_line(raw, encoding)
            publish_quietly(sink, Event(kind=LOG_OUTPUT_EVENT, payload=line, stream=name))
            lines.append(line)
    except (OSError, ValueError) as read_error:
        error = str(read_error)
        logger.warning("%s reader stopped early: %s", name, read_error)
    finally:
        try:
            stream.close()
        except OSError:
            pass
    logger.debug("%s reader finished after %d lines", name, len(lines))
    return CapturedStream(name=name, lines=tuple(lines), error=error)


class StreamReader:
    """Run :func:`read_stream` on a dedicated daemon thread."""

    def __init__(
        self,
        stream: IO[bytes],
        *,
        name: str,
        sink: EventSink | None = None,
        encoding: str = "utf-8",
    ) -> None:
        self.name = name
        self._stream = stream
        self._sink = sink
        self._encoding = encoding
        self._result: CapturedStream | None = None
        self._thread = threading.Thread(
            target=self._run,
            name=f"solverkit-{name}-reader",
            daemon=True,
        )

    def _run(self) -> None:
        self._result = read_stream(
            self._stream,
            name=self.name,
            sink=self._sink,
            encoding=self._encoding,
        )

    def start(self) -> "StreamReader":
        self._thread.start()
        return self

    def join(self, timeout: float | None = None) -> CapturedStream:
        self._thread.join(timeout)
        if self._result is None:
            # Still running after the timeout, or the thread died before finishing.
            return CapturedStream(
                name=self.name,
                error="reader did not finish",
            )
        return self._result
