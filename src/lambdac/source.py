"""Source positions, spans, and input reading."""

from __future__ import annotations

import codecs
from dataclasses import dataclass, replace
from typing import IO, AnyStr

from lambdac.errors import ReadError


@dataclass(frozen=True)
class Position:
    """Row/column of a rune in the input. Rows start at 1, columns at 0."""

    row: int = 1
    col: int = 0

    def new_row(self) -> Position:
        return Position(self.row + 1, 0)

    def advance(self) -> Position:
        return self.advance_by(1)

    def advance_by(self, n: int) -> Position:
        return replace(self, col=self.col + n)

    def __str__(self) -> str:
        return f"{self.row}:{self.col}"


START_POSITION = Position(1, 0)


@dataclass(frozen=True)
class Span:
    """A range within a source file, 1-based for display."""

    file: str
    start_line: int
    start_col: int
    end_line: int
    end_col: int

    @classmethod
    def from_position(cls, file: str, position: Position, length: int = 1) -> Span:
        """Span covering ``length`` runes starting at a 0-based position."""
        start = position.col + 1
        return cls(file, position.row, start, position.row, start + max(length, 1) - 1)

    def __str__(self) -> str:
        return f"{self.file}:{self.start_line}:{self.start_col}"


def read_source(stream: IO[AnyStr], chunk_size: int = 8192) -> str:
    """Read a whole text or binary stream into a string.

    Binary streams are decoded as UTF-8. Any failure to pull data from the
    stream is raised as ReadError, never mistaken for end of input.
    """
    decoder = codecs.getincrementaldecoder("utf-8")()
    chunks: list[str] = []
    try:
        while True:
            chunk = stream.read(chunk_size)
            if not chunk:
                break
            if isinstance(chunk, bytes):
                chunks.append(decoder.decode(chunk))
            else:
                chunks.append(chunk)
        chunks.append(decoder.decode(b"", final=True))
    except (OSError, UnicodeDecodeError) as e:
        raise ReadError(f"can't read input: {e}") from e
    return "".join(chunks)
