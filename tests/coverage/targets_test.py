import json
from pathlib import Path

import pytest

from solcover.coverage.solc_ast import SolcAST, SolcAstIndex, SolcSource
from solcover.coverage.targets import BRANCH, FUNCTION, STATEMENT, SourceRangeTable
from solcover.solidity.position import PositionIndex
from solcover.solidity.sourcemap import SourceRange

TESTDATA = Path(__file__).parent.parent / "testdata"


@pytest.fixture
def ast_index():
    with open(str(TESTDATA / "input_contracts" / "cont.sol"), "rb") as f:
        position_index = PositionIndex(f.read().decode("utf-8"))
    with open(str(TESTDATA / "inputs" / "cont.sol.json")) as f:
        source = json.load(f)["sources"]["cont.sol"]
    return SolcAstIndex(SolcSource(source).ast, position_index)


def test_table_resolves_on_offset_length_and_file():
    # Arrange
    table = SourceRangeTable()
    table.add_statement(1, "10:5:0")
    table.add_function(2, "0:40:0")

    # Act
    targets = table.resolve(SourceRange.parse("10:5:0:o"))

    # Assert
    assert [(target.kind, target.target_id) for target in targets] == [(STATEMENT, 1)]
    assert table.resolve(SourceRange.parse("10:5:1")) == []
    assert table.resolve(SourceRange.empty()) == []


def test_table_branch_arms():
    table = SourceRangeTable()
    table.add_branch_arm(61, 0, "456:12:0")
    table.add_branch_arm(61, 1, "488:13:0")

    targets = table.resolve(SourceRange.parse("488:13:0"))

    assert len(targets) == 1
    assert targets[0].kind == BRANCH
    assert targets[0].arm == 1
    assert table.initial_fragment().b == {61: [0, 0]}


def test_table_initial_fragment():
    table = SourceRangeTable()
    table.add_statement(1, "10:5:0")
    table.add_function(2, "0:40:0")
    table.add_branch(3, arms=3)

    fragment = table.initial_fragment("a.sol")

    assert fragment.path == "a.sol"
    assert fragment.s == {1: 0}
    assert fragment.f == {2: 0}
    assert fragment.b == {3: [0, 0, 0]}
    assert fragment.statement_map == {}


def test_ast_functions(ast_index):
    assert sorted(ast_index.functions) == [15, 33, 47, 63]
    assert ast_index.functions[63] == {
        "name": "h",
        "line": 29,
        "loc": {"start": {"line": 29, "column": 2}, "end": {"line": 29, "column": 22}},
    }
    assert ast_index.functions[15]["name"] == "(constructor)"


def test_ast_function_resolves_on_full_range(ast_index):
    targets = ast_index.resolve(SourceRange.parse("365:146:0"))

    assert [(target.kind, target.target_id) for target in targets] == [(FUNCTION, 63)]


def test_ast_statements(ast_index):
    assert sorted(ast_index.statements) == [13, 27, 31, 45, 54, 55, 59]
    assert ast_index.statements[55] == {
        "start": {"line": 34, "column": 7},
        "end": {"line": 34, "column": 16},
    }


def test_ast_if_statement(ast_index):
    # Act
    arms, description = ast_index.branches[61]

    # Assert
    assert arms == 2
    assert description["type"] == "if"
    assert description["line"] == 34
    assert description["loc"] == {
        "start": {"line": 34, "column": 4},
        "end": {"line": 34, "column": 18},
    }
    assert description["locations"] == [
        {"start": {"line": 34, "column": 18}, "end": {"line": 36, "column": 5}},
        {"start": {"line": 36, "column": 11}, "end": {"line": 38, "column": 5}},
    ]


def test_ast_first_statement_of_arm_counts_for_branch(ast_index):
    (true_statement,) = ast_index.resolve(SourceRange.parse("456:12:0"))
    (false_statement,) = ast_index.resolve(SourceRange.parse("488:13:0"))

    assert true_statement.parent == (61, 0)
    assert false_statement.parent == (61, 1)


def test_ast_initial_fragment(ast_index):
    fragment = ast_index.initial_fragment("cont.sol")

    assert fragment.b == {61: [0, 0]}
    assert fragment.f == {15: 0, 33: 0, 47: 0, 63: 0}
    assert sorted(fragment.l) == [7, 10, 13, 17, 18, 21, 26, 29, 34, 35, 37]
    assert fragment.is_empty


def test_if_without_else():
    # Arrange
    position_index = PositionIndex("if (a) { b; }")
    ast = SolcAST(
        {
            "nodeType": "IfStatement",
            "id": 7,
            "src": "0:13:0",
            "condition": {"nodeType": "Identifier", "id": 1, "src": "4:1:0"},
            "trueBody": {
                "nodeType": "Block",
                "id": 5,
                "src": "7:6:0",
                "statements": [
                    {"nodeType": "ExpressionStatement", "id": 4, "src": "9:2:0"}
                ],
            },
            "falseBody": None,
        }
    )

    # Act
    index = SolcAstIndex(ast, position_index)

    # Assert
    _, description = index.branches[7]
    assert description["locations"][0] == description["locations"][1]
    assert sorted(index.statements) == [1, 4]


def test_legacy_ast():
    source = SolcSource({"id": 2, "legacyAST": {"name": "SourceUnit", "children": []}})

    assert source.id == 2
    assert source.ast.node_type == "SourceUnit"
    assert source.ast.nodes == []
    assert SolcSource({}).ast is None


def test_loop_and_unchecked_block():
    # Arrange
    position_index = PositionIndex("while (a) { unchecked { b; } c; }")
    ast = SolcAST(
        {
            "nodeType": "WhileStatement",
            "id": 9,
            "src": "0:33:0",
            "condition": {"nodeType": "Identifier", "id": 1, "src": "7:1:0"},
            "body": {
                "nodeType": "Block",
                "id": 8,
                "src": "10:23:0",
                "statements": [
                    {
                        "nodeType": "UncheckedBlock",
                        "id": 5,
                        "src": "12:16:0",
                        "statements": [
                            {
                                "nodeType": "ExpressionStatement",
                                "id": 4,
                                "src": "24:2:0",
                            }
                        ],
                    },
                    {"nodeType": "ExpressionStatement", "id": 7, "src": "29:2:0"},
                ],
            },
        }
    )

    # Act
    index = SolcAstIndex(ast, position_index)

    # Assert
    assert sorted(index.statements) == [4, 7, 9]
    assert index.branches == {}
