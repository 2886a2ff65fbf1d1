"""This module contains various helper classes and functions to deal with EVM
code disassembly."""

import re
from typing import List, Optional, Union

from solcover.ethereum import util
from solcover.support.opcodes import ADDRESS_OPCODE_MAPPING

regex_PUSH = re.compile(r"^PUSH(\d*)$")


class EvmInstruction:
    """Model to hold the information of the disassembly."""

    def __init__(self, address: int, op_code: str, argument: Optional[str] = None):
        self.address = address
        self.op_code = op_code
        self.argument = argument

    def to_dict(self) -> dict:
        """

        :return:
        """
        result = {"address": self.address, "opcode": self.op_code}
        if self.argument:
            result["argument"] = self.argument
        return result


def disassemble(bytecode: Union[str, bytes]) -> List[EvmInstruction]:
    """Disassembles evm bytecode and returns a list of instructions.

    Push operands are attached to their push instruction, so every element
    of the result is one logical instruction. Bytes that are no known opcode
    become INVALID instructions of one byte.

    :param bytecode: Hex string or raw bytes
    :return:
    """
    instruction_list = []
    address = 0

    if isinstance(bytecode, str):
        bytecode = util.safe_decode(bytecode)
    length = len(bytecode)

    while address < length:
        try:
            op_code = ADDRESS_OPCODE_MAPPING[bytecode[address]]
        except KeyError:
            instruction_list.append(EvmInstruction(address, "INVALID"))
            address += 1
            continue

        current_instruction = EvmInstruction(address, op_code)

        match = regex_PUSH.match(op_code)
        if match:
            operand_length = int(match.group(1))
            argument_bytes = bytecode[address + 1 : address + 1 + operand_length]
            if operand_length:
                current_instruction.argument = "0x" + argument_bytes.hex()
            address += operand_length

        instruction_list.append(current_instruction)
        address += 1

    return instruction_list
