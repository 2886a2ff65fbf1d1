"""This module builds the statement, branch and function table of a file
from the JSON AST emitted by solc."""
import logging
from typing import List, Optional, Tuple

from solcover.coverage.targets import SourceRangeTable
from solcover.solidity.position import PositionIndex
from solcover.solidity.sourcemap import SourceRange

log = logging.getLogger(__name__)

STATEMENT_NODES = {
    "ExpressionStatement",
    "Return",
    "EmitStatement",
    "VariableDeclarationStatement",
    "BinaryOperation",
    "UnaryOperation",
    "Identifier",
    "RevertStatement",
}

LOOP_NODES = {"ForStatement", "WhileStatement", "DoWhileStatement"}

BLOCK_NODES = {"Block", "UncheckedBlock"}


class SolcAST:
    def __init__(self, ast):
        self.ast = ast

    @property
    def node_type(self):
        if "nodeType" in self.ast:
            return self.ast["nodeType"]
        if "name" in self.ast:
            return self.ast["name"]
        assert False, "Unknown AST type has been fed to SolcAST"

    @property
    def id(self):
        return self.ast.get("id")

    @property
    def src(self) -> SourceRange:
        return SourceRange.parse(self.ast["src"])

    @property
    def nodes(self):
        if "nodes" in self.ast:
            return self.ast["nodes"]
        if "children" in self.ast:
            return self.ast["children"]
        return []

    def child(self, name) -> Optional["SolcAST"]:
        if self.ast.get(name) is None:
            return None
        return SolcAST(self.ast[name])

    def get(self, item, default=None):
        return self.ast.get(item, default)

    def __getitem__(self, item):
        return self.ast[item]


class SolcSource:
    def __init__(self, source):
        self.source = source

    @property
    def ast(self) -> Optional[SolcAST]:
        if "ast" in self.source:
            return SolcAST(self.source["ast"])
        if "legacyAST" in self.source:
            return SolcAST(self.source["legacyAST"])
        return None

    @property
    def id(self):
        return self.source.get("id")


def _statements(body: Optional[SolcAST]) -> List[SolcAST]:
    """The statements of a block, or the statement itself for bodies
    without braces."""
    if body is None:
        return []
    if body.node_type in BLOCK_NODES:
        return [SolcAST(statement) for statement in body.get("statements") or []]
    return [body]


class SolcAstIndex(SourceRangeTable):
    """Statement, branch and function table derived from a solc AST.

    Function hits are reported for the function header only (up to the end
    of the parameter list). The first statement of every arm of an if
    statement counts towards that arm of the branch.
    """

    def __init__(self, ast: SolcAST, position_index: PositionIndex) -> None:
        super().__init__()
        self.position_index = position_index
        self._visit(ast)
        log.debug(
            "Indexed {} statements, {} branches and {} functions".format(
                len(self.statements), len(self.branches), len(self.functions)
            )
        )

    def _location(self, source_range: SourceRange):
        return self.position_index.resolve_range(source_range)

    def _visit(self, ast: SolcAST) -> None:
        pending = [(ast, None)]  # type: List[Tuple[SolcAST, Optional[Tuple[int, int]]]]

        while pending:
            node, parent = pending.pop()
            children = []  # type: List[Tuple[SolcAST, Optional[Tuple[int, int]]]]
            node_type = node.node_type

            if node_type in ("SourceUnit", "ContractDefinition"):
                children = [(SolcAST(child), None) for child in node.nodes]

            elif node_type in ("FunctionDefinition", "ModifierDefinition"):
                self._add_function(node)
                children = [
                    (statement, None) for statement in _statements(node.child("body"))
                ]

            elif node_type == "IfStatement":
                children = self._add_if_statement(node)

            elif node_type in LOOP_NODES:
                self.add_statement(node.id, node.src, self._location(node.src), parent)
                children = [
                    (statement, None) for statement in _statements(node.child("body"))
                ]

            elif node_type in BLOCK_NODES:
                children = [(statement, parent) for statement in _statements(node)]
                # only the first statement of the block stands for the arm
                children = children[:1] + [(child, None) for child, _ in children[1:]]

            elif node_type in STATEMENT_NODES:
                self.add_statement(node.id, node.src, self._location(node.src), parent)

            # children are pushed reversed so they are visited in source order
            pending.extend(reversed(children))

    def _add_function(self, node: SolcAST) -> None:
        function_range = node.src
        parameters = node.child("parameters")
        if parameters is not None:
            header_end = parameters.src.end
        else:
            header_end = function_range.end
        header = SourceRange(
            function_range.offset,
            header_end - function_range.offset,
            function_range.file_id,
        )

        if node.get("isConstructor") or node.get("kind") == "constructor":
            name = "(constructor)"
        else:
            name = node.get("name") or "({})".format(node.get("kind", "fallback"))

        self.add_function(node.id, function_range, name, self._location(header))

    def _add_if_statement(self, node: SolcAST):
        if_range = node.src
        true_body = node.child("trueBody")
        false_body = node.child("falseBody")

        true_location = self._location(true_body.src)
        false_location = (
            self._location(false_body.src) if false_body is not None else true_location
        )
        guard_location = self._location(if_range.subtract(true_body.src))

        self.add_branch(
            node.id,
            arms=2,
            locations=[true_location, false_location],
            loc=guard_location,
        )

        children = []
        condition = node.child("condition")
        if condition is not None:
            children.append((condition, None))
        for arm, body in enumerate((true_body, false_body)):
            for index, statement in enumerate(_statements(body)):
                children.append((statement, (node.id, arm) if index == 0 else None))
        return children
