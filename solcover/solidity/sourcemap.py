"""This module contains the representation of compact solc source map
entries and the decompression of source map streams.

A source map stream is a ``;`` separated list of ``offset:length:file:jump``
entries, one per instruction. Fields that are left empty inherit their value
from the previous entry, so the stream has to be decoded left to right.
"""
from enum import Enum
from typing import List, Optional

from solcover.exceptions import PositionError, SourceMapDecodeError

ENTRY_SEPARATOR = ";"
FIELD_SEPARATOR = ":"
MAX_FIELDS = 5


class JumpKind(Enum):
    """The jump annotation of a source map entry."""

    INTO_FUNCTION = "i"
    OUT_OF_FUNCTION = "o"
    REGULAR = "-"
    NONE = ""

    @classmethod
    def from_char(cls, char: str) -> "JumpKind":
        for kind in cls:
            if kind is not cls.NONE and kind.value == char:
                return kind
        raise SourceMapDecodeError("Unknown jump type '{}'".format(char))


def _parse_field(fields: List[str], index: int, inherited: Optional[int]):
    if index >= len(fields) or fields[index] == "":
        return inherited
    try:
        return int(fields[index])
    except ValueError:
        raise SourceMapDecodeError(
            "Invalid source map field '{}' in entry '{}'".format(
                fields[index], FIELD_SEPARATOR.join(fields)
            )
        )


class SourceRange:
    """A decoded source map entry.

    Instances are immutable, every operation returns a new range. ``None``
    in a field means the value is unknown, which is what the empty range
    uses for all of its fields.
    """

    __slots__ = ("_offset", "_length", "_file_id", "_jump", "_modifier_depth")

    def __init__(
        self,
        offset: Optional[int],
        length: Optional[int],
        file_id: Optional[int] = None,
        jump: JumpKind = JumpKind.NONE,
        modifier_depth: Optional[int] = None,
    ) -> None:
        self._offset = offset
        self._length = length
        self._file_id = file_id
        self._jump = jump
        self._modifier_depth = modifier_depth

    @property
    def offset(self) -> Optional[int]:
        return self._offset

    @property
    def length(self) -> Optional[int]:
        return self._length

    @property
    def file_id(self) -> Optional[int]:
        return self._file_id

    @property
    def jump(self) -> JumpKind:
        return self._jump

    @property
    def modifier_depth(self) -> Optional[int]:
        return self._modifier_depth

    @property
    def end(self) -> int:
        """The exclusive end offset of the range."""
        return self.offset + self.length

    @property
    def is_empty(self) -> bool:
        return self == _EMPTY

    @property
    def is_complete(self) -> bool:
        """Whether the range carries both an offset and a length."""
        return self._offset is not None and self._length is not None

    @staticmethod
    def empty() -> "SourceRange":
        """Returns the range used for instructions without a source."""
        return _EMPTY

    @classmethod
    def parse(cls, entry: str) -> "SourceRange":
        """Parses a fully specified entry such as ``365:146:0``.

        :param entry: The compact entry
        :return: The decoded range, the empty range for an empty string
        """
        return _EMPTY.create_relative_to(entry)

    @classmethod
    def decode(cls, entry: str, previous: "SourceRange") -> "SourceRange":
        """Decodes a single compact entry relative to the entry before it.

        Empty fields inherit the value of ``previous``, an entirely empty
        entry repeats ``previous``. A missing jump field means the entry has
        no jump annotation.

        :param entry: The compact entry, e.g. ``:14`` or ``26:487:0:-``
        :param previous: The decoded entry preceding ``entry``
        :return: The decoded range
        """
        if entry == "":
            return previous

        fields = entry.split(FIELD_SEPARATOR)
        if len(fields) > MAX_FIELDS:
            raise SourceMapDecodeError("Too many fields in entry '{}'".format(entry))

        offset = _parse_field(fields, 0, previous.offset)
        length = _parse_field(fields, 1, previous.length)
        file_id = _parse_field(fields, 2, previous.file_id)

        if len(fields) < 4:
            jump = JumpKind.NONE
        elif fields[3] == "":
            jump = previous.jump
        else:
            jump = JumpKind.from_char(fields[3])

        modifier_depth = (
            _parse_field(fields, 4, previous.modifier_depth)
            if len(fields) > 4
            else None
        )

        if (offset is not None and offset < 0) or (length is not None and length < 0):
            raise SourceMapDecodeError(
                "Negative offset or length in '{}'".format(entry)
            )

        return cls(offset, length, file_id, jump, modifier_depth)

    def create_relative_to(self, entry: str) -> "SourceRange":
        """Decodes ``entry`` using this range as the previous entry.

        :param entry: The compact entry
        :return: The decoded range, the empty range for an empty string
        """
        if not entry:
            return _EMPTY
        return SourceRange.decode(entry, self)

    def subtract(self, other: "SourceRange") -> "SourceRange":
        """Returns the part of this range that precedes ``other``.

        This is used to isolate e.g. the condition of an if statement from
        its body. ``other`` may not start before this range, when it starts
        after the end of this range the whole range is returned.

        :param other: A range nested in this one
        :return: A range starting at this range's offset
        """
        if not (self.is_complete and other.offset is not None):
            raise PositionError("Cannot subtract incomplete source ranges")
        if other.offset < self.offset:
            raise PositionError(
                "Range {} starts before range {}".format(other, self)
            )
        length = min(other.offset - self.offset, self.length)
        return SourceRange(self.offset, length, self.file_id)

    def __str__(self) -> str:
        if self.is_empty:
            return ""

        fields = [
            "" if value is None else str(value)
            for value in (self.offset, self.length, self.file_id)
        ]
        if self.jump is not JumpKind.NONE or self.modifier_depth is not None:
            fields.append(self.jump.value)
        if self.modifier_depth is not None:
            fields.append(str(self.modifier_depth))
        return FIELD_SEPARATOR.join(fields)

    def __repr__(self) -> str:
        return "<SourceRange '{}'>".format(self)

    def __eq__(self, other) -> bool:
        if not isinstance(other, SourceRange):
            return NotImplemented
        return (
            self.offset == other.offset
            and self.length == other.length
            and self.file_id == other.file_id
            and self.jump == other.jump
            and self.modifier_depth == other.modifier_depth
        )

    def __hash__(self) -> int:
        return hash(
            (self.offset, self.length, self.file_id, self.jump, self.modifier_depth)
        )

    def key(self) -> str:
        """The ``offset:length:file`` key used to look up AST nodes."""
        return "{}:{}:{}".format(self.offset, self.length, self.file_id)


_EMPTY = SourceRange(None, None, None, JumpKind.NONE)

ORIGIN = SourceRange(0, 0, 0, JumpKind.NONE)


def decode_source_map(source_map: str) -> List[SourceRange]:
    """Decompresses a complete source map stream.

    :param source_map: The ``;`` separated stream emitted by the compiler
    :return: One decoded range per entry
    """
    if not source_map:
        return []

    ranges = []
    previous = ORIGIN
    for entry in source_map.split(ENTRY_SEPARATOR):
        previous = SourceRange.decode(entry, previous)
        ranges.append(previous)
    return ranges
