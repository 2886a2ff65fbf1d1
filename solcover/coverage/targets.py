"""This module contains the lookup from source ranges to the statement,
branch and function ids that coverage is reported for."""
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple, Union

from solcover.solidity.position import LocationRange
from solcover.solidity.sourcemap import SourceRange

if TYPE_CHECKING:
    from solcover.coverage.fragment import CoverageFragment  # noqa: F401

STATEMENT = "s"
BRANCH = "b"
FUNCTION = "f"


class CoverageTarget:
    """Something coverage is counted for.

    Statements and functions are identified by ``kind`` and ``target_id``.
    A branch target additionally names the ``arm`` that was taken. A
    statement may have a ``parent`` (branch id, arm), executing the
    statement then also counts as taking that arm.
    """

    def __init__(
        self,
        kind: str,
        target_id: int,
        arm: Optional[int] = None,
        location: Optional[LocationRange] = None,
        parent: Optional[Tuple[int, int]] = None,
    ) -> None:
        if kind not in (STATEMENT, BRANCH, FUNCTION):
            raise ValueError("Unknown coverage target kind '{}'".format(kind))
        if kind == BRANCH and arm is None:
            raise ValueError("Branch targets need an arm index")
        self.kind = kind
        self.target_id = target_id
        self.arm = arm
        self.location = location
        self.parent = parent

    @property
    def key(self) -> Tuple[str, int, Optional[int]]:
        return self.kind, self.target_id, self.arm

    def __repr__(self) -> str:
        return "<CoverageTarget {}{}{}>".format(
            self.kind,
            self.target_id,
            "" if self.arm is None else "[{}]".format(self.arm),
        )


class IdResolver(ABC):
    """Maps the source range of an executed instruction onto coverage targets."""

    @abstractmethod
    def resolve(self, source_range: SourceRange) -> List[CoverageTarget]:
        """

        :param source_range: The source range of an executed instruction
        :return: The targets that are hit by executing the instruction
        """
        raise NotImplementedError

    @abstractmethod
    def initial_fragment(self, path: Optional[str] = None) -> "CoverageFragment":
        """

        :param path: The path reported in the fragment
        :return: A fragment listing every known target with zero hits
        """
        raise NotImplementedError


class SourceRangeTable(IdResolver):
    """An :class:`IdResolver` backed by a table of source range keys.

    Ranges are matched on ``offset:length:file``, the jump annotation of the
    instruction does not matter.
    """

    def __init__(self) -> None:
        self._targets = {}  # type: Dict[str, List[CoverageTarget]]
        self.statements = {}  # type: Dict[int, Optional[dict]]
        self.functions = {}  # type: Dict[int, Optional[dict]]
        self.branches = {}  # type: Dict[int, Tuple[int, Optional[dict]]]

    @staticmethod
    def _key(src: Union[str, SourceRange]) -> str:
        if isinstance(src, str):
            src = SourceRange.parse(src)
        return src.key()

    def _register(self, src: Union[str, SourceRange], target: CoverageTarget) -> None:
        self._targets.setdefault(self._key(src), []).append(target)

    def add_statement(
        self,
        statement_id: int,
        src: Union[str, SourceRange],
        location: Optional[LocationRange] = None,
        parent: Optional[Tuple[int, int]] = None,
    ) -> None:
        self.statements[statement_id] = location.as_dict() if location else None
        self._register(
            src,
            CoverageTarget(STATEMENT, statement_id, location=location, parent=parent),
        )

    def add_function(
        self,
        function_id: int,
        src: Union[str, SourceRange],
        name: Optional[str] = None,
        location: Optional[LocationRange] = None,
    ) -> None:
        if location:
            self.functions[function_id] = {
                "name": name,
                "line": location.start.line,
                "loc": location.as_dict(),
            }
        else:
            self.functions[function_id] = None
        self._register(src, CoverageTarget(FUNCTION, function_id, location=location))

    def add_branch(
        self,
        branch_id: int,
        arms: int = 2,
        locations: Optional[List[LocationRange]] = None,
        loc: Optional[LocationRange] = None,
        branch_type: str = "if",
    ) -> None:
        description = None
        if loc is not None:
            description = {
                "type": branch_type,
                "line": loc.start.line,
                "loc": loc.as_dict(),
                "locations": [location.as_dict() for location in locations or []],
            }
        self.branches[branch_id] = (arms, description)

    def add_branch_arm(
        self, branch_id: int, arm: int, src: Union[str, SourceRange]
    ) -> None:
        """Registers a range whose execution means that ``arm`` of the branch
        was taken."""
        arms, description = self.branches.get(branch_id, (2, None))
        self.branches[branch_id] = (max(arms, arm + 1), description)
        self._register(src, CoverageTarget(BRANCH, branch_id, arm=arm))

    def resolve(self, source_range: SourceRange) -> List[CoverageTarget]:
        if not source_range.is_complete:
            return []
        return list(self._targets.get(source_range.key(), []))

    def initial_fragment(self, path: Optional[str] = None) -> "CoverageFragment":
        from solcover.coverage.fragment import CoverageFragment

        fragment = CoverageFragment(path)
        for statement_id, location in self.statements.items():
            fragment.s[statement_id] = 0
            if location:
                fragment.statement_map[statement_id] = location
        for function_id, description in self.functions.items():
            fragment.f[function_id] = 0
            if description:
                fragment.fn_map[function_id] = description
        for branch_id, (arms, description) in self.branches.items():
            fragment.b[branch_id] = [0] * arms
            if description:
                fragment.branch_map[branch_id] = description
        for targets in self._targets.values():
            for target in targets:
                if target.kind != BRANCH and target.location is not None:
                    for line in target.location.lines:
                        fragment.l[line] = 0
        return fragment
