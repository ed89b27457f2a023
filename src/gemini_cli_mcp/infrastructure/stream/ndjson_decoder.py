"""
Newline-Delimited JSON Stream Decoder

Turns the raw stdout chunks of the Gemini CLI into ``StreamEvent`` values.

Chunk boundaries carry no meaning: a record may be split across any number
of reads, and one read may hold many records. The decoder keeps the trailing
partial line in a carry-over buffer until its terminator arrives. Byte chunks
go through an incremental UTF-8 decoder so that a multi-byte character split
between two reads is reassembled instead of mangled.

Malformed lines (invalid JSON, non-object records, records without a string
``type``) are dropped and decoding continues with the next line.
"""

from __future__ import annotations

import codecs
from collections.abc import Iterable, Iterator

import structlog

from gemini_cli_mcp.core.domain.stream_events import StreamEvent, parse_stream_event

logger = structlog.get_logger(__name__)

LINE_TERMINATOR = "\n"


class StreamEventDecoder:
    """
    Incremental decoder for ``--output-format stream-json`` output.

    Example:
        >>> decoder = StreamEventDecoder()
        >>> decoder.feed(b'{"type": "init", "session_')
        []
        >>> [e.session_id for e in decoder.feed(b'id": "abc"}\\n')]
        ['abc']
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self._text_decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._buffer = ""
        self._discarded = 0

    @property
    def pending(self) -> str:
        """Text received after the last line terminator."""
        return self._buffer

    @property
    def discarded_lines(self) -> int:
        """Number of non-blank lines dropped as malformed so far."""
        return self._discarded

    def decode_text(self, chunk: bytes | str) -> str:
        """Convert a chunk to text without touching the line buffer."""
        if isinstance(chunk, bytes):
            return self._text_decoder.decode(chunk)
        return chunk

    def feed(self, chunk: bytes | str) -> list[StreamEvent]:
        """
        Append a chunk and return the events completed by it.

        Args:
            chunk: Raw bytes or already-decoded text

        Returns:
            Events for every line terminated within this chunk, in order.
        """
        return self.feed_text(self.decode_text(chunk))

    def feed_text(self, text: str) -> list[StreamEvent]:
        """Like ``feed`` for text that was already converted by ``decode_text``."""
        if not text:
            return []
        self._buffer += text
        if LINE_TERMINATOR not in text:
            return []
        *lines, self._buffer = self._buffer.split(LINE_TERMINATOR)
        return self._parse_lines(lines)

    def end_text(self) -> str:
        """Return text still held back by the byte decoder at end of stream."""
        return self._text_decoder.decode(b"", final=True)

    def flush(self) -> list[StreamEvent]:
        """Decode whatever is left once the stream has ended."""
        tail = self._buffer + self.end_text()
        self._buffer = ""
        return self._parse_lines([tail])

    def _parse_lines(self, lines: list[str]) -> list[StreamEvent]:
        events: list[StreamEvent] = []
        for line in lines:
            if not line.strip():
                continue
            event = parse_stream_event(line)
            if event is None:
                self._discarded += 1
                logger.debug("stream_line_discarded", line=line[:200])
                continue
            events.append(event)
        return events


def decode_lines(chunks: Iterable[bytes | str]) -> Iterator[StreamEvent]:
    """
    Lazily decode a finite sequence of chunks.

    Yields events in arrival order and flushes the final unterminated line
    once the chunks are exhausted.
    """
    decoder = StreamEventDecoder()
    for chunk in chunks:
        yield from decoder.feed(chunk)
    yield from decoder.flush()
