"""This module contains the coverage bookkeeping of a single Solidity file."""
import logging
from collections import Counter
from typing import Dict, Iterator, List, Optional, Set, Union

from solcover.coverage.fragment import CoverageFragment
from solcover.coverage.solc_ast import SolcAstIndex, SolcSource
from solcover.coverage.targets import FUNCTION, CoverageTarget, IdResolver
from solcover.coverage.trace import CallFrame, Trace
from solcover.disassembler.disassembly import Disassembly, InstructionEntry
from solcover.exceptions import (
    CompilerOutputError,
    PositionError,
    SequencingError,
)
from solcover.solidity.position import LocationRange, PositionIndex
from solcover.solidity.sourcemap import JumpKind, SourceRange
from solcover.support.support_args import args

log = logging.getLogger(__name__)

CREATION = "creation"
DEPLOYED = "deployed"

# share of a call frame's steps a table has to match to be aligned with it
MIN_ALIGNED_FRACTION = 0.5


def _get_disassembly(name: str, contract: dict, key: str) -> Disassembly:
    try:
        bytecode = contract["evm"][key]
        code = bytecode["object"]
        source_map = bytecode["sourceMap"] if code else bytecode.get("sourceMap", "")
    except (KeyError, TypeError):
        raise CompilerOutputError(
            "Contract {} has no {} object or source map".format(name, key)
        )
    if not isinstance(code, str) or not isinstance(source_map, str):
        raise CompilerOutputError("Contract {} has a malformed {}".format(name, key))
    return Disassembly(code, source_map)


class SourceFileCoverage:
    """Coverage of one source file.

    Holds the text of the file, the disassembled creation and runtime code
    of every contract the compiler produced for it and the running coverage
    total. Traces are replayed against the disassembled code and the hits
    are added to the total.
    """

    def __init__(
        self,
        filename: str,
        path: str,
        text: str,
        resolver: Optional[IdResolver] = None,
    ) -> None:
        """

        :param filename: The name the compiler knows the file by
        :param path: The path the file was loaded from
        :param text: The contents of the file
        :param resolver: Table of statements, branches and functions, built
            from the compiler's AST when omitted
        """
        self.filename = filename
        self.path = path
        self.text = text
        self.position_index = PositionIndex(text)
        self.source_id = None  # type: Optional[int]
        self.contract_bytecode = None  # type: Optional[Dict[str, Disassembly]]
        self.contract_deployed_bytecode = None  # type: Optional[Dict[str, Disassembly]]
        self.resolver = resolver
        self._resolver_from_ast = False
        self.coverage = CoverageFragment(path)
        if resolver is not None:
            self.coverage = self.coverage.merge(resolver.initial_fragment(path))

    def set_resolver(self, resolver: IdResolver) -> None:
        """Replaces the statement, branch and function table.

        :param resolver:
        """
        self.resolver = resolver
        self._resolver_from_ast = False
        self.coverage = self.coverage.merge(resolver.initial_fragment(self.path))

    @property
    def is_ingested(self) -> bool:
        return self.contract_bytecode is not None

    def is_interface(self) -> bool:
        """Whether compiler output was ingested and none of the contracts in
        this file has code."""
        if not self.is_ingested:
            return False
        return all(len(disassembly) == 0 for _, _, disassembly in self._tables())

    def ingest_compiler_output(
        self, contracts: Dict[str, dict], source: Optional[dict] = None
    ) -> None:
        """Disassembles the creation and runtime code of every contract.

        Tables of contracts that were ingested before are replaced, collected
        coverage is kept. Nothing is replaced when any contract fails to
        decode.

        :param contracts: The compiler output of this file, contract name to contract
        :param source: The compiler's ``sources`` entry of this file
        """
        solc_source = SolcSource(source or {})
        source_id = solc_source.id if solc_source.id is not None else self.source_id

        creation_tables = {}
        deployed_tables = {}
        for name, contract in contracts.items():
            creation_tables[name] = _get_disassembly(name, contract, "bytecode")
            deployed_tables[name] = _get_disassembly(name, contract, "deployedBytecode")
            for disassembly in (creation_tables[name], deployed_tables[name]):
                self._check_source_ranges(name, disassembly, source_id)
            log.debug(
                "Disassembled {}: {} creation and {} runtime instructions".format(
                    name, len(creation_tables[name]), len(deployed_tables[name])
                )
            )

        resolver = None
        ast = solc_source.ast
        if ast is not None and (self.resolver is None or self._resolver_from_ast):
            try:
                resolver = SolcAstIndex(ast, self.position_index)
            except (PositionError, KeyError) as e:
                raise CompilerOutputError(
                    "Invalid AST for {}: {}".format(self.filename, e)
                )

        self.source_id = source_id
        if self.contract_bytecode is None:
            self.contract_bytecode = {}
            self.contract_deployed_bytecode = {}
        self.contract_bytecode.update(creation_tables)
        self.contract_deployed_bytecode.update(deployed_tables)

        if resolver is not None:
            self.resolver = resolver
            self._resolver_from_ast = True
            self.coverage = self.coverage.merge(resolver.initial_fragment(self.path))

    def _check_source_ranges(
        self, name: str, disassembly: Disassembly, source_id: Optional[int]
    ) -> None:
        if source_id is None:
            return
        for entry in disassembly.instruction_list:
            source_range = entry.source_range
            if not source_range.is_complete or source_range.file_id != source_id:
                continue
            if source_range.end <= self.position_index.size:
                continue
            message = "Source range '{}' of {} exceeds {} ({} bytes)".format(
                source_range, name, self.filename, self.position_index.size
            )
            if args.strict_source_ranges:
                raise CompilerOutputError(message)
            log.warning(message)
            entry.source_range = SourceRange.empty()

    def resolve_location(self, compact_entry: str) -> LocationRange:
        """Resolves a fully specified compact entry, e.g. ``71:60:0``, to the
        start and end location in this file.

        :param compact_entry:
        :return:
        """
        return self.position_index.resolve_range(SourceRange.parse(compact_entry))

    def _tables(self) -> Iterator:
        """Yields (kind, contract name, disassembly) in alignment order."""
        for name in sorted(self.contract_deployed_bytecode or {}):
            yield DEPLOYED, name, self.contract_deployed_bytecode[name]
        for name in sorted(self.contract_bytecode or {}):
            yield CREATION, name, self.contract_bytecode[name]

    def _align(self, frame: CallFrame) -> Optional[Disassembly]:
        """Finds the code a call frame was executing.

        A step matches a table when its program counter is the address of an
        instruction in the table and, when opcode verification is enabled,
        the instruction's mnemonic matches the step's. The frame aligns with
        the table matching the most steps, ties go to the table that comes
        first. A table matching less than ``MIN_ALIGNED_FRACTION`` of the
        steps is not considered.
        """
        best = None  # type: Optional[Disassembly]
        best_matches = 0
        for kind, _, disassembly in self._tables():
            if kind == CREATION and not args.include_creation_code:
                continue
            if len(disassembly) == 0:
                continue
            matches = sum(
                1 for step in frame.steps if self._matches(disassembly, step)
            )
            if matches > best_matches:
                best, best_matches = disassembly, matches
        if best_matches < len(frame) * MIN_ALIGNED_FRACTION:
            return None
        return best

    @staticmethod
    def _matches(disassembly: Disassembly, step) -> bool:
        if step.pc is None:
            return False
        entry = disassembly.get_instruction(step.pc)
        if entry is None:
            return False
        return not (args.verify_opcodes and step.op and step.op != entry.opcode)

    def _is_own_range(self, source_range: SourceRange) -> bool:
        if not source_range.is_complete:
            return False
        return self.source_id is None or source_range.file_id == self.source_id

    def record_trace(self, trace: Union[Trace, dict, list]) -> CoverageFragment:
        """Replays a trace and adds its hits to the coverage of this file.

        :param trace: The executed steps, see :meth:`Trace.load`
        :return: A copy of the cumulative coverage of this file
        """
        if not self.is_ingested:
            raise SequencingError(
                "Error generating coverage: solc output was not assigned"
            )

        trace = Trace.load(trace)
        visits = Counter()  # type: Counter
        targets = {}  # type: Dict[tuple, CoverageTarget]
        skipped = 0
        for frame in trace.frames():
            disassembly = self._align(frame)
            if disassembly is None:
                log.debug(
                    "Skipping {} steps at depth {} in {}".format(
                        len(frame), frame.depth, self.filename
                    )
                )
                skipped += len(frame)
                continue

            previous = set()  # type: Set[tuple]
            for step in frame.steps:
                if not self._matches(disassembly, step):
                    skipped += 1
                    continue
                entry = disassembly.get_instruction(step.pc)
                entry.seen = True
                current = set()
                for target in self._targets_of(entry):
                    current.add(target.key)
                    targets[target.key] = target
                    # consecutive instructions of one visit count once
                    if target.key not in previous:
                        visits[target.key] += 1
                previous = current

        log.info(
            "Replayed {} of {} steps against {}".format(
                len(trace) - skipped, len(trace), self.filename
            )
        )
        increment = CoverageFragment(self.path)
        for key, count in visits.items():
            increment.hit(targets[key], count)
        self.coverage = self.coverage.merge(increment)
        return self.coverage.copy()

    def _targets_of(self, entry: InstructionEntry) -> List[CoverageTarget]:
        """Returns the statements, branch arms and functions executing
        ``entry`` counts for."""
        if self.resolver is None or not self._is_own_range(entry.source_range):
            return []
        return [
            target
            for target in self.resolver.resolve(entry.source_range)
            # jumps into and out of a function carry the function's range
            if not (target.kind == FUNCTION and entry.jump is not JumpKind.NONE)
        ]

    def instruction_coverage(self) -> Dict[str, Dict[str, dict]]:
        """Returns the number of seen instructions of every contract.

        :return: contract name -> "creation" or "deployed" ->
            {"bytecode_hash": ..., "covered": ..., "total": ...}
        """
        if not self.is_ingested:
            raise SequencingError(
                "Error generating coverage: solc output was not assigned"
            )

        result = {}  # type: Dict[str, Dict[str, dict]]
        for kind, name, disassembly in self._tables():
            if len(disassembly) == 0:
                continue
            covered = disassembly.seen_count
            result.setdefault(name, {})[kind] = {
                "bytecode_hash": disassembly.bytecode_hash,
                "covered": covered,
                "total": len(disassembly),
            }
            log.info(
                "Achieved {:.2f}% instruction coverage for {} code of {}".format(
                    covered / float(len(disassembly)) * 100, kind, name
                )
            )
        return result
