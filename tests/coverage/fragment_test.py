import pytest

from solcover.coverage.fragment import CoverageFragment
from solcover.coverage.targets import (
    BRANCH,
    FUNCTION,
    STATEMENT,
    CoverageTarget,
)
from solcover.solidity.position import Location, LocationRange


def fragment(s=None, b=None, f=None, l=None):
    return CoverageFragment("cont.sol", s=s, b=b, f=f, l=l)


def test_merge_branch_counts():
    # Arrange
    first = fragment(b={61: [1, 0]}, f={63: 1})
    second = fragment(b={61: [0, 0]}, f={63: 5})

    # Act
    merged = first.merge(second)

    # Assert
    assert merged.b == {61: [1, 0]}
    assert merged.f == {63: 6}


def test_merge_does_not_modify_operands():
    first = fragment(s={1: 1}, b={61: [1, 0]})
    second = fragment(s={1: 2}, b={61: [0, 3]})

    first + second

    assert first.s == {1: 1}
    assert first.b == {61: [1, 0]}
    assert second.b == {61: [0, 3]}


merge_test_data = [
    fragment(s={1: 1, 2: 0}, b={61: [1, 0]}, f={63: 1}, l={29: 1}),
    fragment(s={2: 4}, b={61: [0, 2], 70: [1, 1]}, f={15: 1}, l={7: 2}),
    fragment(s={3: 1}, b={61: [5, 0]}, f={63: 2}, l={29: 2, 30: 1}),
]


def test_merge_is_commutative():
    first, second, _ = merge_test_data

    assert first.merge(second) == second.merge(first)


def test_merge_is_associative():
    first, second, third = merge_test_data

    assert first.merge(second).merge(third) == first.merge(second.merge(third))


def test_merge_with_empty_fragment():
    first = merge_test_data[0]

    assert first.merge(CoverageFragment()) == first
    assert CoverageFragment().merge(first) == first


def test_merge_pads_branch_counts():
    merged = fragment(b={61: [1]}).merge(fragment(b={61: [0, 0, 2]}))

    assert merged.b == {61: [1, 0, 2]}


def test_merge_keeps_maps():
    location = {"start": {"line": 1, "column": 0}, "end": {"line": 1, "column": 5}}
    first = CoverageFragment("cont.sol", s={1: 0}, statement_map={1: location})
    second = CoverageFragment("cont.sol", s={1: 1})

    merged = first.merge(second)

    assert merged.statement_map == {1: location}
    assert merged.s == {1: 1}


def test_hit_statement_counts_lines():
    # Arrange
    target = CoverageTarget(
        STATEMENT, 55, location=LocationRange(Location(34, 7), Location(35, 2))
    )
    increment = CoverageFragment()

    # Act
    increment.hit(target, 3)

    # Assert
    assert increment.s == {55: 3}
    assert increment.l == {34: 3, 35: 3}


def test_hit_statement_with_parent_branch():
    target = CoverageTarget(STATEMENT, 59, parent=(61, 1))
    increment = CoverageFragment()

    increment.hit(target)

    assert increment.s == {59: 1}
    assert increment.b == {61: [0, 1]}


def test_hit_branch_and_function():
    increment = CoverageFragment()

    increment.hit(CoverageTarget(BRANCH, 61, arm=0), 2)
    increment.hit(CoverageTarget(FUNCTION, 63))

    assert increment.b == {61: [2]}
    assert increment.f == {63: 1}
    assert increment.l == {}


def test_invalid_targets():
    with pytest.raises(ValueError):
        CoverageTarget("x", 1)
    with pytest.raises(ValueError):
        CoverageTarget(BRANCH, 1)


def test_is_empty():
    assert fragment(s={1: 0}, b={61: [0, 0]}, f={63: 0}).is_empty
    assert not fragment(b={61: [0, 1]}).is_empty


def test_copy_is_independent():
    original = fragment(b={61: [1, 0]})

    copy = original.copy()
    copy.b[61][1] = 7

    assert original.b == {61: [1, 0]}


def test_to_dict():
    # Arrange
    report = fragment(s={13: 2, 5: 0}, b={61: [1, 0]}, f={63: 1}, l={29: 1})

    # Act
    result = report.to_dict()

    # Assert
    assert result == {
        "path": "cont.sol",
        "s": {"13": 2, "5": 0},
        "b": {"61": [1, 0]},
        "f": {"63": 1},
        "l": {"29": 1},
        "statementMap": {},
        "fnMap": {},
        "branchMap": {},
    }
    assert list(result["s"]) == ["5", "13"]
