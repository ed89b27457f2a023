"""Decoding of the Gemini CLI ``stream-json`` output."""

from gemini_cli_mcp.infrastructure.stream.ndjson_decoder import StreamEventDecoder, decode_lines

__all__ = ["StreamEventDecoder", "decode_lines"]
