"""This module contains utility functions for handling compiler emitted
bytecode strings."""
import logging
import re

from solcover.exceptions import BytecodeDecodeError

log = logging.getLogger(__name__)

# Unlinked library references look like __$<34 hex chars>$__ or __LibName_____...
LINK_PLACEHOLDER = re.compile(r"(_{2}.{38})")
DUMMY_ADDRESS = "aa" * 20


def link_placeholders(hex_encoded_string: str) -> str:
    """Replaces unlinked library placeholders with a dummy address so the
    bytecode can be decoded.

    :param hex_encoded_string:
    :return:
    """
    return LINK_PLACEHOLDER.sub(DUMMY_ADDRESS, hex_encoded_string)


def safe_decode(hex_encoded_string: str) -> bytes:
    """

    :param hex_encoded_string:
    :return:
    """
    hex_encoded_string = link_placeholders(hex_encoded_string.strip())
    if hex_encoded_string.startswith("0x"):
        hex_encoded_string = hex_encoded_string[2:]
    try:
        return bytes.fromhex(hex_encoded_string)
    except ValueError as e:
        raise BytecodeDecodeError("Invalid bytecode hex string: {}".format(e))
