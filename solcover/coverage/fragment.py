"""This module contains the per file coverage counters.

A :class:`CoverageFragment` is a value: replaying a trace produces a new
fragment holding the hits of that trace, which is then merged into the
running total. Merging adds counters elementwise, so the total does not
depend on the order in which traces are recorded.
"""
from copy import deepcopy
from typing import Dict, List, Optional

from solcover.coverage.targets import BRANCH, FUNCTION, STATEMENT, CoverageTarget


def _add_counts(left: Dict, right: Dict) -> Dict:
    result = dict(left)
    for key, count in right.items():
        result[key] = result.get(key, 0) + count
    return result


def _add_branch_counts(left: Dict, right: Dict) -> Dict:
    result = {key: list(counts) for key, counts in left.items()}
    for key, counts in right.items():
        current = result.get(key, [])
        size = max(len(current), len(counts))
        current = current + [0] * (size - len(current))
        counts = list(counts) + [0] * (size - len(counts))
        result[key] = [a + b for a, b in zip(current, counts)]
    return result


def _union(left: Dict, right: Dict) -> Dict:
    result = dict(right)
    result.update(left)
    return result


class CoverageFragment:
    """Statement, branch, function and line hit counters of one file, along
    with the maps describing where those statements, branches and functions
    are."""

    def __init__(
        self,
        path: Optional[str] = None,
        s: Optional[Dict[int, int]] = None,
        b: Optional[Dict[int, List[int]]] = None,
        f: Optional[Dict[int, int]] = None,
        l: Optional[Dict[int, int]] = None,
        statement_map: Optional[Dict[int, dict]] = None,
        fn_map: Optional[Dict[int, dict]] = None,
        branch_map: Optional[Dict[int, dict]] = None,
    ) -> None:
        self.path = path
        self.s = s or {}
        self.b = b or {}
        self.f = f or {}
        self.l = l or {}
        self.statement_map = statement_map or {}
        self.fn_map = fn_map or {}
        self.branch_map = branch_map or {}

    def hit(self, target: CoverageTarget, count: int = 1) -> None:
        """Adds ``count`` hits of ``target`` to this fragment.

        :param target: The statement, branch arm or function that was executed
        :param count: How many times it was executed
        """
        if target.kind == STATEMENT:
            self.s[target.target_id] = self.s.get(target.target_id, 0) + count
        elif target.kind == FUNCTION:
            self.f[target.target_id] = self.f.get(target.target_id, 0) + count
        elif target.kind == BRANCH:
            self._hit_branch(target.target_id, target.arm, count)

        if target.kind != BRANCH and target.location is not None:
            for line in target.location.lines:
                self.l[line] = self.l.get(line, 0) + count

        if target.parent is not None:
            branch_id, arm = target.parent
            self._hit_branch(branch_id, arm, count)

    def _hit_branch(self, branch_id: int, arm: int, count: int) -> None:
        counts = self.b.setdefault(branch_id, [])
        if len(counts) <= arm:
            counts.extend([0] * (arm + 1 - len(counts)))
        counts[arm] += count

    def merge(self, other: "CoverageFragment") -> "CoverageFragment":
        """Returns a new fragment with the counters of both fragments added up.

        :param other: The fragment to merge with
        :return: The merged fragment
        """
        return CoverageFragment(
            path=self.path or other.path,
            s=_add_counts(self.s, other.s),
            b=_add_branch_counts(self.b, other.b),
            f=_add_counts(self.f, other.f),
            l=_add_counts(self.l, other.l),
            statement_map=_union(self.statement_map, other.statement_map),
            fn_map=_union(self.fn_map, other.fn_map),
            branch_map=_union(self.branch_map, other.branch_map),
        )

    __add__ = merge

    def copy(self) -> "CoverageFragment":
        return deepcopy(self)

    @property
    def is_empty(self) -> bool:
        return not (
            any(self.s.values())
            or any(any(counts) for counts in self.b.values())
            or any(self.f.values())
        )

    def to_dict(self) -> dict:
        """Returns the fragment in the istanbul coverage format."""

        def stringify(mapping):
            return {str(key): value for key, value in sorted(mapping.items())}

        return {
            "path": self.path,
            "s": stringify(self.s),
            "b": stringify({key: list(value) for key, value in self.b.items()}),
            "f": stringify(self.f),
            "l": stringify(self.l),
            "statementMap": stringify(self.statement_map),
            "fnMap": stringify(self.fn_map),
            "branchMap": stringify(self.branch_map),
        }

    def __eq__(self, other) -> bool:
        if not isinstance(other, CoverageFragment):
            return NotImplemented
        return (
            self.s == other.s
            and self.b == other.b
            and self.f == other.f
            and self.l == other.l
        )

    def __repr__(self) -> str:
        return "<CoverageFragment {} s={} b={} f={}>".format(
            self.path, self.s, self.b, self.f
        )
