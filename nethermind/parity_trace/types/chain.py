from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Protocol, Sequence

from eth_typing import ChecksumAddress, HexStr

from nethermind.parity_trace.types import BlockIdentifier, BlockReference
from nethermind.parity_trace.types.trace import (
    BlockTraceNotification,
    CallArgs,
    TraceConfig,
    TxTraceResult,
)


@dataclass(slots=True, frozen=True)
class BlockHeader:
    """Block header fields required for reward synthesis"""

    number: int
    hash: HexStr
    coinbase: ChecksumAddress
    parent_hash: HexStr | None = None


@dataclass(slots=True, frozen=True)
class Block:
    """Block header, and the uncle headers referenced by the block in block order"""

    header: BlockHeader
    uncles: tuple[BlockHeader, ...] = field(default_factory=tuple)

    @property
    def number(self) -> int:
        return self.header.number

    @property
    def hash(self) -> HexStr:
        return self.header.hash

    @property
    def coinbase(self) -> ChecksumAddress:
        return self.header.coinbase


class ChainReader(Protocol):
    """Read access to the canonical chain, and to the block currently being built"""

    chain_config: Any

    async def get_block_by_number(self, number: int) -> Block | None:
        """Returns the canonical block at a height, or None if it does not exist"""
        ...

    async def current_block(self) -> Block | None:
        """Returns the head of the chain"""
        ...

    async def pending_block(self) -> Block | None:
        """Returns the in-progress candidate block, or None if the node is not building one"""
        ...


class ConsensusRewards(Protocol):
    """Consensus reward source.  Computes the miner reward, and one reward per rewarded uncle"""

    def get_rewards(
        self,
        chain_config: Any,
        header: BlockHeader,
        uncles: Sequence[BlockHeader],
    ) -> tuple[int, Sequence[int]]:
        """Returns the miner reward, and the rewards of the rewarded uncles in uncle order"""
        ...


class ExecutionTracer(Protocol):
    """Runs the EVM under a tracer.  Results are tracer defined"""

    async def trace_block_by_number(self, block: BlockIdentifier, config: TraceConfig) -> list[TxTraceResult]:
        """Traces every transaction of a block, returning one result per transaction in block order"""
        ...

    async def trace_transaction(self, tx_hash: HexStr, config: TraceConfig) -> Any:
        """Traces a single mined transaction"""
        ...

    def trace_chain(self, start: Block, end: Block, config: TraceConfig) -> AsyncIterator[BlockTraceNotification]:
        """Traces a range of blocks, yielding one notification per traced block"""
        ...

    async def trace_call(self, args: CallArgs, block: BlockReference, config: TraceConfig) -> Any:
        """Traces a hypothetical transaction executed on top of a block's state"""
        ...

    async def trace_call_many(self, args: Sequence[CallArgs], block: BlockReference, config: TraceConfig) -> Any:
        """Traces an ordered batch of hypothetical transactions sharing one base state"""
        ...
