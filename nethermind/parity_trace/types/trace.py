import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from eth_typing import ChecksumAddress, HexStr
from eth_utils import to_checksum_address, to_hex

from nethermind.parity_trace.exceptions import TraceDecodingError
from nethermind.parity_trace.utils import (
    drop_none,
    parse_quantity,
    to_wire_address,
    to_wire_hash,
)

# Disabling naming check that wants enums to use UPPER_CASE
# pylint: disable=invalid-name


class RewardType(Enum):
    """Reward types reported in the rewardType field of Parity reward traces"""

    block = "block"
    uncle = "uncle"


@dataclass(slots=True, frozen=True)
class TraceConfig:
    """
    Tracer configuration supplied by the caller.  Only ``tracer`` and ``nested_trace_output`` are interpreted
    when shaping responses, the remaining options are passed through to the execution tracer.
    """

    tracer: str | None = None
    nested_trace_output: bool = False

    timeout: str | None = None
    reexec: int | None = None
    disable_storage: bool = False
    disable_stack: bool = False
    enable_memory: bool = False
    enable_return_data: bool = False

    @classmethod
    def from_json(cls, data: dict[str, Any] | None) -> "TraceConfig | None":
        """Parses a camelCase trace config object.  Returns None for a missing config"""
        if data is None:
            return None
        if not isinstance(data, dict):
            raise ValueError(f"Trace config must be an object, not {type(data).__name__}")

        def _flag(key: str) -> bool:
            value = data.get(key)
            if value is None:
                return False
            if not isinstance(value, bool):
                raise ValueError(f"{key} must be a boolean, not {value!r}")
            return value

        reexec = data.get("reexec")
        return cls(
            tracer=data.get("tracer"),
            nested_trace_output=_flag("nestedTraceOutput"),
            timeout=data.get("timeout"),
            reexec=parse_quantity(reexec) if reexec is not None else None,
            disable_storage=_flag("disableStorage"),
            disable_stack=_flag("disableStack"),
            enable_memory=_flag("enableMemory"),
            enable_return_data=_flag("enableReturnData"),
        )

    def to_json(self) -> dict[str, Any]:
        """Returns the wire representation of the config, omitting unset options"""
        output: dict[str, Any] = drop_none({"tracer": self.tracer, "timeout": self.timeout, "reexec": self.reexec})
        for key, enabled in (
            ("nestedTraceOutput", self.nested_trace_output),
            ("disableStorage", self.disable_storage),
            ("disableStack", self.disable_stack),
            ("enableMemory", self.enable_memory),
            ("enableReturnData", self.enable_return_data),
        ):
            if enabled:
                output[key] = True
        return output


@dataclass(slots=True, frozen=True)
class TraceFilterArgs:
    """
    Arguments of a trace_filter request.

    The address filters and the ``after``/``count`` pagination hints are part of the request schema, but are not
    applied when validating or dispatching range traces.
    """

    from_block: int = 0
    to_block: int = 0
    from_address: ChecksumAddress | None = None
    to_address: ChecksumAddress | None = None
    after: int = 0
    count: int = 0

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "TraceFilterArgs":
        """Parses trace_filter arguments.  Block numbers and pagination values may be hex or integer quantities"""
        if not isinstance(data, dict):
            raise ValueError(f"Trace filter must be an object, not {type(data).__name__}")

        from_address = data.get("fromAddress")
        to_address = data.get("toAddress")
        return cls(
            from_block=parse_quantity(data.get("fromBlock")),
            to_block=parse_quantity(data.get("toBlock")),
            from_address=to_checksum_address(from_address) if from_address else None,
            to_address=to_checksum_address(to_address) if to_address else None,
            after=parse_quantity(data.get("after")),
            count=parse_quantity(data.get("count")),
        )


@dataclass(slots=True, frozen=True)
class CallArgs:
    """Hypothetical transaction executed by trace_call and trace_callMany"""

    from_address: ChecksumAddress | None = None
    to: ChecksumAddress | None = None
    gas: int | None = None
    gas_price: int | None = None
    value: int | None = None
    data: HexStr | None = None

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "CallArgs":
        """Parses an eth_call style transaction object.  ``input`` is accepted as an alias of ``data``"""
        if not isinstance(data, dict):
            raise ValueError(f"Call arguments must be an object, not {type(data).__name__}")

        def _optional_quantity(key: str) -> int | None:
            return parse_quantity(data[key]) if data.get(key) is not None else None

        from_address, to = data.get("from"), data.get("to")
        return cls(
            from_address=to_checksum_address(from_address) if from_address else None,
            to=to_checksum_address(to) if to else None,
            gas=_optional_quantity("gas"),
            gas_price=_optional_quantity("gasPrice"),
            value=_optional_quantity("value"),
            data=data.get("data", data.get("input")),
        )

    def to_json(self) -> dict[str, Any]:
        return drop_none(
            {
                "from": to_wire_address(self.from_address) if self.from_address else None,
                "to": to_wire_address(self.to) if self.to else None,
                "gas": to_hex(self.gas) if self.gas is not None else None,
                "gasPrice": to_hex(self.gas_price) if self.gas_price is not None else None,
                "value": to_hex(self.value) if self.value is not None else None,
                "data": self.data,
            }
        )


@dataclass(slots=True, frozen=True)
class TraceRewardAction:
    """Action of a Parity formatted reward trace"""

    value: int
    author: ChecksumAddress
    reward_type: RewardType

    def to_json(self) -> dict[str, Any]:
        return {
            "value": to_hex(self.value),
            "author": to_wire_address(self.author),
            "rewardType": self.reward_type.value,
        }


@dataclass(slots=True, frozen=True)
class RewardTrace:
    """
    Synthesized block or uncle reward trace.  Reward traces are never produced by the execution tracer, so their
    call frame fields are fixed: no result, no subtraces, an empty trace address, and no transaction.
    """

    action: TraceRewardAction
    block_hash: HexStr
    block_number: int

    def to_json(self) -> dict[str, Any]:
        return {
            "action": self.action.to_json(),
            "blockHash": to_wire_hash(self.block_hash),
            "blockNumber": self.block_number,
            "result": None,
            "subtraces": 0,
            "traceAddress": [],
            "transactionHash": None,
            "transactionPosition": None,
            "type": "reward",
        }


@dataclass(slots=True, frozen=True)
class TransactionTrace:
    """Single trace entry produced by the execution tracer.  The payload is tracer defined and passed through as-is"""

    payload: Any

    def to_json(self) -> Any:
        return self.payload


TraceRecord = TransactionTrace | RewardTrace


@dataclass(slots=True, frozen=True)
class TxTraceResult:
    """
    Result of tracing a single transaction.  ``result`` is either the raw JSON bytes returned by the tracer, or
    an already decoded value.  Strings are decoded values, and are never parsed again.
    """

    result: Any = None
    error: str | None = None

    def to_json(self) -> dict[str, Any]:
        result = self.result
        if isinstance(result, (bytes, bytearray)):
            try:
                result = json.loads(result)
            except ValueError as e:
                raise TraceDecodingError(f"Could not decode transaction trace: {e}") from e
        return drop_none({"result": result, "error": self.error or None})


@dataclass(slots=True, frozen=True)
class BlockTraceNotification:
    """One item of a streamed range trace, holding the transaction traces of a single block"""

    block: int
    hash: HexStr
    traces: list[TxTraceResult] = field(default_factory=list)

    def to_json(self) -> dict[str, Any]:
        return {
            "block": to_hex(self.block),
            "hash": to_wire_hash(self.hash),
            "traces": [trace.to_json() for trace in self.traces],
        }
