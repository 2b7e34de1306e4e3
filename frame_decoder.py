# File: frame_decoder.py
"""
frame_decoder.py

Turns raw byte chunks from a streaming HTTP body into complete text lines.
Chunks may end anywhere, including inside a multi-byte character; a line is
only emitted once its terminating newline has arrived.
"""
import codecs
import logging

logger = logging.getLogger(__name__)


class FrameDecoder:
    def __init__(self, encoding='utf-8'):
        self._decoder = codecs.getincrementaldecoder(encoding)(errors='replace')
        # text after the last newline seen so far
        self.partial = ''

    def feed(self, chunk: bytes) -> list[str]:
        """Decode one chunk and return the lines it completes, in order."""
        if not chunk:
            return []
        text = self._decoder.decode(chunk)
        if not text:
            return []
        lines = (self.partial + text).split('\n')
        self.partial = lines.pop()
        return [ln[:-1] if ln.endswith('\r') else ln for ln in lines]

    def close(self) -> str:
        """
        End of input. The unterminated remainder is dropped, not emitted,
        since the producer always ends events with a newline. Returns the
        dropped fragment so callers can log it.
        """
        dropped = self.partial + self._decoder.decode(b'', final=True)
        self.partial = ''
        if dropped:
            logger.debug("Dropping unterminated trailing fragment (%d chars)", len(dropped))
        return dropped
