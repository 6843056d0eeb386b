"""Overlapping text chunker.

Text longer than the window is cut into windows of ``max_chars``. Each window
end is pulled back to the latest natural breakpoint (blank line or sentence
terminator followed by a space) when that breakpoint lies in the trailing half
of the window. The next window starts ``overlap_chars`` before the previous
end.
"""

from unified_mind.core.config import ChunkingProfile
from unified_mind.core.logging import get_logger

logger = get_logger(__name__)

BREAKPOINTS = ("\n\n", ". ", "? ", "! ")


def find_breakpoint(window: str) -> int:
    """Index of the latest breakpoint in ``window``, or -1."""
    return max(window.rfind(delimiter) for delimiter in BREAKPOINTS)


class Chunker:
    """Splits text according to a ``ChunkingProfile``."""

    def __init__(self, profile: ChunkingProfile | None = None):
        self.profile = profile or ChunkingProfile()
        if self.profile.overlap_chars >= self.profile.max_chars:
            logger.warning(
                "Chunk overlap is not smaller than chunk width; windows will advance one character at a time",
                extra=self.profile.model_dump(),
            )

    @property
    def max_chars(self) -> int:
        return self.profile.max_chars

    @property
    def overlap_chars(self) -> int:
        return self.profile.overlap_chars

    def chunk(self, text: str) -> list[str]:
        """Split ``text`` into ordered, trimmed, non-empty chunks.

        Text that already fits in one window is returned untouched as a single
        chunk. Callers are expected to reject empty text beforehand.
        """
        max_chars = self.max_chars
        if len(text) <= max_chars:
            return [text]

        chunks: list[str] = []
        start = 0
        while start < len(text):
            end = start + max_chars

            if end < len(text):
                last_break = find_breakpoint(text[start:end])
                if last_break > max_chars * 0.5:
                    end = start + last_break + 1

            piece = text[start:end].strip()
            if piece:
                chunks.append(piece)

            # Always move forward, even with a misconfigured overlap
            start = max(end - self.overlap_chars, start + 1)

        return chunks
