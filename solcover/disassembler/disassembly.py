from typing import Dict, List, Optional
import logging

from solcover.disassembler import asm
from solcover.ethereum import util
from solcover.solidity.sourcemap import SourceRange, decode_source_map
from solcover.support.support_utils import get_code_hash

log = logging.getLogger(__name__)


class InstructionEntry:
    """A disassembled instruction paired with its source range.

    ``seen`` only ever goes from False to True while traces are replayed.
    """

    def __init__(
        self,
        address: int,
        opcode: str,
        source_range: SourceRange,
        argument: Optional[str] = None,
    ) -> None:
        self.address = address
        self.opcode = opcode
        self.source_range = source_range
        self.argument = argument
        self.seen = False

    @property
    def jump(self):
        return self.source_range.jump

    def to_dict(self) -> dict:
        return {
            "address": self.address,
            "instruction": self.opcode,
            "sourceMap": str(self.source_range),
            "jump": self.jump.value,
            "seen": self.seen,
        }

    def __repr__(self) -> str:
        return "<InstructionEntry {} {} '{}'{}>".format(
            self.address, self.opcode, self.source_range, " seen" if self.seen else ""
        )


def disassemble(bytecode: str, source_map: str) -> List[InstructionEntry]:
    """Disassembles bytecode and zips every logical instruction with its
    source map entry.

    Push operands do not consume source map entries. Instructions beyond the
    end of the source map get the empty range.

    :param bytecode: The hex encoded bytecode
    :param source_map: The compact source map of the bytecode
    :return: The instruction entries in code order
    """
    source_ranges = decode_source_map(source_map)
    instruction_list = asm.disassemble(bytecode)

    if len(source_ranges) > len(instruction_list):
        log.debug(
            "Source map has {} entries for {} instructions".format(
                len(source_ranges), len(instruction_list)
            )
        )

    entries = []
    for index, instruction in enumerate(instruction_list):
        if index < len(source_ranges):
            source_range = source_ranges[index]
        else:
            source_range = SourceRange.empty()
        entries.append(
            InstructionEntry(
                instruction.address,
                instruction.op_code,
                source_range,
                instruction.argument,
            )
        )
    return entries


class Disassembly(object):
    """
    Disassembly class

    Stores bytecode, its source map and the instruction entries built from
    both. Instructions can be looked up by their byte address, which is the
    program counter reported by tracers.
    """

    def __init__(self, code: str, source_map: str = ""):
        self.bytecode = code
        self.source_map = source_map
        self.instruction_list = disassemble(code, source_map)
        self._address_to_index = {
            entry.address: index for index, entry in enumerate(self.instruction_list)
        }  # type: Dict[int, int]

    def __len__(self) -> int:
        return len(self.instruction_list)

    def __getitem__(self, index: int) -> InstructionEntry:
        return self.instruction_list[index]

    @property
    def bytecode_hash(self) -> str:
        """

        :return: keccak hash of the (linked) bytecode
        """
        return get_code_hash(util.link_placeholders(self.bytecode))

    @property
    def seen_count(self) -> int:
        return sum(1 for entry in self.instruction_list if entry.seen)

    def get_instruction_index(self, address: int) -> Optional[int]:
        """Returns the index of the instruction starting at ``address``, None
        when ``address`` is not the start of an instruction.

        :param address:
        :return:
        """
        return self._address_to_index.get(address)

    def get_instruction(self, address: int) -> Optional[InstructionEntry]:
        index = self.get_instruction_index(address)
        if index is None:
            return None
        return self.instruction_list[index]
