from typing import Dict


ADDRESS = "address"
OPERAND = "operand"

# Only the information needed to walk instruction boundaries is kept:
# the byte value of the opcode and the number of immediate operand bytes.
OPCODES: Dict = {
    "STOP": {ADDRESS: 0x00},
    "ADD": {ADDRESS: 0x01},
    "MUL": {ADDRESS: 0x02},
    "SUB": {ADDRESS: 0x03},
    "DIV": {ADDRESS: 0x04},
    "SDIV": {ADDRESS: 0x05},
    "MOD": {ADDRESS: 0x06},
    "SMOD": {ADDRESS: 0x07},
    "ADDMOD": {ADDRESS: 0x08},
    "MULMOD": {ADDRESS: 0x09},
    "EXP": {ADDRESS: 0x0A},
    "SIGNEXTEND": {ADDRESS: 0x0B},
    "LT": {ADDRESS: 0x10},
    "GT": {ADDRESS: 0x11},
    "SLT": {ADDRESS: 0x12},
    "SGT": {ADDRESS: 0x13},
    "EQ": {ADDRESS: 0x14},
    "ISZERO": {ADDRESS: 0x15},
    "AND": {ADDRESS: 0x16},
    "OR": {ADDRESS: 0x17},
    "XOR": {ADDRESS: 0x18},
    "NOT": {ADDRESS: 0x19},
    "BYTE": {ADDRESS: 0x1A},
    "SHL": {ADDRESS: 0x1B},
    "SHR": {ADDRESS: 0x1C},
    "SAR": {ADDRESS: 0x1D},
    "SHA3": {ADDRESS: 0x20},
    "ADDRESS": {ADDRESS: 0x30},
    "BALANCE": {ADDRESS: 0x31},
    "ORIGIN": {ADDRESS: 0x32},
    "CALLER": {ADDRESS: 0x33},
    "CALLVALUE": {ADDRESS: 0x34},
    "CALLDATALOAD": {ADDRESS: 0x35},
    "CALLDATASIZE": {ADDRESS: 0x36},
    "CALLDATACOPY": {ADDRESS: 0x37},
    "CODESIZE": {ADDRESS: 0x38},
    "CODECOPY": {ADDRESS: 0x39},
    "GASPRICE": {ADDRESS: 0x3A},
    "EXTCODESIZE": {ADDRESS: 0x3B},
    "EXTCODECOPY": {ADDRESS: 0x3C},
    "RETURNDATASIZE": {ADDRESS: 0x3D},
    "RETURNDATACOPY": {ADDRESS: 0x3E},
    "EXTCODEHASH": {ADDRESS: 0x3F},
    "BLOCKHASH": {ADDRESS: 0x40},
    "COINBASE": {ADDRESS: 0x41},
    "TIMESTAMP": {ADDRESS: 0x42},
    "NUMBER": {ADDRESS: 0x43},
    "DIFFICULTY": {ADDRESS: 0x44},
    "GASLIMIT": {ADDRESS: 0x45},
    "CHAINID": {ADDRESS: 0x46},
    "SELFBALANCE": {ADDRESS: 0x47},
    "BASEFEE": {ADDRESS: 0x48},
    "BLOBHASH": {ADDRESS: 0x49},
    "BLOBBASEFEE": {ADDRESS: 0x4A},
    "POP": {ADDRESS: 0x50},
    "MLOAD": {ADDRESS: 0x51},
    "MSTORE": {ADDRESS: 0x52},
    "MSTORE8": {ADDRESS: 0x53},
    "SLOAD": {ADDRESS: 0x54},
    "SSTORE": {ADDRESS: 0x55},
    "JUMP": {ADDRESS: 0x56},
    "JUMPI": {ADDRESS: 0x57},
    "PC": {ADDRESS: 0x58},
    "MSIZE": {ADDRESS: 0x59},
    "GAS": {ADDRESS: 0x5A},
    "JUMPDEST": {ADDRESS: 0x5B},
    "TLOAD": {ADDRESS: 0x5C},
    "TSTORE": {ADDRESS: 0x5D},
    "MCOPY": {ADDRESS: 0x5E},
    "LOG0": {ADDRESS: 0xA0},
    "LOG1": {ADDRESS: 0xA1},
    "LOG2": {ADDRESS: 0xA2},
    "LOG3": {ADDRESS: 0xA3},
    "LOG4": {ADDRESS: 0xA4},
    "CREATE": {ADDRESS: 0xF0},
    "CALL": {ADDRESS: 0xF1},
    "CALLCODE": {ADDRESS: 0xF2},
    "RETURN": {ADDRESS: 0xF3},
    "DELEGATECALL": {ADDRESS: 0xF4},
    "CREATE2": {ADDRESS: 0xF5},
    "STATICCALL": {ADDRESS: 0xFA},
    "REVERT": {ADDRESS: 0xFD},
    "INVALID": {ADDRESS: 0xFE},
    "SELFDESTRUCT": {ADDRESS: 0xFF},
}

for opcode_data in OPCODES.values():
    opcode_data[OPERAND] = 0

for i in range(0, 33):
    OPCODES[f"PUSH{i}"] = {ADDRESS: 0x5F + i, OPERAND: i}

for i in range(1, 17):
    OPCODES[f"DUP{i}"] = {ADDRESS: 0x7F + i, OPERAND: 0}
    OPCODES[f"SWAP{i}"] = {ADDRESS: 0x8F + i, OPERAND: 0}

ADDRESS_OPCODE_MAPPING = {}

for opcode, opcode_data in OPCODES.items():
    ADDRESS_OPCODE_MAPPING[opcode_data[ADDRESS]] = opcode

# Mnemonics used by tracers for opcodes that were renamed over time.
OPCODE_ALIASES = {
    "KECCAK256": "SHA3",
    "PREVRANDAO": "DIFFICULTY",
    "RANDOM": "DIFFICULTY",
    "SUICIDE": "SELFDESTRUCT",
}


def normalize_opcode_name(name: str) -> str:
    """Maps a tracer mnemonic onto the name used in :data:`OPCODES`.

    :param name: The mnemonic as reported by a tracer
    :return: The canonical mnemonic
    """
    name = name.upper()
    return OPCODE_ALIASES.get(name, name)
