import json
import re
from typing import Any

from eth_typing import HexStr
from eth_utils import to_hex

from nethermind.parity_trace.types import BlockIdentifier, BlockReference

BLOCK_HASH_RE = re.compile(r"^0x[0-9a-fA-F]{64}$")


class HexEnabledJsonEncoder(json.JSONEncoder):
    """JSON Encoder that converts bytes to 0x-prefixed hex"""

    def default(self, o):
        if isinstance(o, bytes):
            return "0x" + o.hex()
        return json.JSONEncoder.default(self, o)


def parse_quantity(value: int | str | None, default: int = 0) -> int:
    """
    Parses a JSON-RPC quantity.  Accepts integers, 0x-prefixed hex strings, and decimal strings.

    :param value: Quantity to parse.  If None, returns default
    :param default: Value returned for missing quantities
    :return: non-negative integer
    """
    if value is None:
        return default
    if isinstance(value, bool):
        raise ValueError(f"Invalid quantity: {value}")
    if isinstance(value, int):
        number = value
    elif isinstance(value, str):
        value = value.strip()
        try:
            number = int(value, 16) if value.lower().startswith("0x") else int(value)
        except ValueError:
            raise ValueError(f"Invalid quantity: {value}")  # pylint: disable=raise-missing-from
    else:
        raise ValueError(f"Invalid quantity: {value}")

    if number < 0:
        raise ValueError(f"Quantity cannot be negative: {value}")
    return number


def parse_block_identifier(block: int | str) -> BlockIdentifier:
    """
    Converts a block parameter into a BlockIdentifier.  Integers and numeric strings are converted to block numbers,
    and the 'latest', 'pending', and 'earliest' tags are passed through.

    :param block:
    :return:
    """
    if isinstance(block, int) and not isinstance(block, bool):
        if block < 0:
            raise ValueError(f"Invalid block identifier: {block}")
        return block

    match block:
        case "latest" | "pending" | "earliest":
            return block
        case "safe" | "finalized":
            raise NotImplementedError(f"'{block}' block identifier is not supported for tracing")
        case str():
            try:
                return parse_quantity(block)
            except ValueError:
                raise ValueError(f"Invalid block identifier: {block}")  # pylint: disable=raise-missing-from
        case _:
            raise ValueError(f"Invalid block identifier: {block}")


def parse_block_reference(block: int | str) -> BlockReference:
    """Parses a block identifier, or a 0x-prefixed 32 byte block hash"""
    if isinstance(block, str) and BLOCK_HASH_RE.fullmatch(block):
        return block.lower()
    return parse_block_identifier(block)


def block_reference_to_param(block: BlockReference) -> str:
    """Converts a block reference into the string parameter expected by JSON-RPC methods"""
    if isinstance(block, int):
        return to_hex(block)
    return block


def to_wire_hash(value: bytes | str) -> HexStr:
    """Returns a lowercase 0x-prefixed hex string for a hash stored as bytes or hex"""
    if isinstance(value, bytes):
        return HexStr("0x" + value.hex())
    return HexStr(value.lower())


def to_wire_address(address: str) -> HexStr:
    """Addresses are serialized as lowercase hex, matching the Parity trace module"""
    return HexStr(address.lower())


def drop_none(values: dict[str, Any]) -> dict[str, Any]:
    """Returns a copy of a dict without keys set to None"""
    return {key: value for key, value in values.items() if value is not None}
