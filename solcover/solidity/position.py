"""This module maps byte offsets of a source file onto line and column
positions."""
from bisect import bisect_right
from typing import List, Union

from solcover.exceptions import PositionError
from solcover.solidity.sourcemap import SourceRange


class Location:
    """A 1-indexed line and 0-indexed column."""

    def __init__(self, line: int, column: int) -> None:
        self.line = line
        self.column = column

    def as_dict(self) -> dict:
        return {"line": self.line, "column": self.column}

    def __eq__(self, other) -> bool:
        if isinstance(other, dict):
            return self.as_dict() == other
        if not isinstance(other, Location):
            return NotImplemented
        return self.line == other.line and self.column == other.column

    def __repr__(self) -> str:
        return "<Location {}:{}>".format(self.line, self.column)


class LocationRange:
    """The start and end location of a source range."""

    def __init__(self, start: Location, end: Location) -> None:
        self.start = start
        self.end = end

    @property
    def lines(self) -> range:
        return range(self.start.line, self.end.line + 1)

    def as_dict(self) -> dict:
        return {"start": self.start.as_dict(), "end": self.end.as_dict()}

    def __eq__(self, other) -> bool:
        if isinstance(other, dict):
            return self.as_dict() == other
        if not isinstance(other, LocationRange):
            return NotImplemented
        return self.start == other.start and self.end == other.end

    def __repr__(self) -> str:
        return "<LocationRange {} - {}>".format(self.start, self.end)


class PositionIndex:
    """Line table of a source file.

    Offsets are byte offsets into the UTF-8 encoded text, which is what the
    compiler uses in its source maps. The offset one past the last byte is
    valid and resolves to the end of the last line.
    """

    def __init__(self, text: Union[str, bytes]) -> None:
        data = text.encode("utf-8") if isinstance(text, str) else text
        self.size = len(data)
        self.line_offsets = []  # type: List[int]
        self.line_lengths = []  # type: List[int]

        offset = 0
        for line in data.split(b"\n"):
            self.line_offsets.append(offset)
            # every line but the last one includes its terminator
            length = min(len(line) + 1, self.size - offset)
            self.line_lengths.append(length)
            offset += len(line) + 1

    def __len__(self) -> int:
        return len(self.line_offsets)

    def resolve(self, offset: int) -> Location:
        """Resolves a byte offset into a location.

        :param offset: Byte offset into the file
        :return: The location of the offset
        """
        if offset < 0 or offset > self.size:
            raise PositionError(
                "Offset {} is outside of the file (size {})".format(offset, self.size)
            )
        index = bisect_right(self.line_offsets, offset) - 1
        return Location(index + 1, offset - self.line_offsets[index])

    def resolve_range(self, source_range: SourceRange) -> LocationRange:
        """Resolves the start and the exclusive end of a source range.

        :param source_range: A complete source range
        :return: The start and end locations
        """
        if not source_range.is_complete:
            raise PositionError(
                "Cannot resolve the incomplete source range '{}'".format(source_range)
            )
        return LocationRange(
            self.resolve(source_range.offset), self.resolve(source_range.end)
        )
