import asyncio
from typing import Any, Sequence

from eth_utils import to_checksum_address

from nethermind.parity_trace.types.chain import Block, BlockHeader
from nethermind.parity_trace.types.trace import (
    BlockTraceNotification,
    CallArgs,
    TraceConfig,
    TxTraceResult,
)

MINER = to_checksum_address("0xea674fdde714fd979de3edf0f56aa9716b898ec8")
BLOCK_REWARD = 2 * 10**18
UNCLE_REWARD = 1_750_000_000_000_000_000

UNCLE_MINERS = [
    to_checksum_address("0x5a0b54d5dc17e0aadc383d2db43b0a0d3e029c4c"),
    to_checksum_address("0x52bc44d5378309ee2abf1539bf71de1b7d7be3b5"),
    to_checksum_address("0x829bd824b016326a401d083b33d092293333a830"),
]


def block_hash(number: int, salt: int = 0) -> str:
    return "0x" + f"{salt:08x}{number:056x}"


def make_block(number: int, uncles: int = 0, coinbase: str = MINER) -> Block:
    return Block(
        header=BlockHeader(
            number=number,
            hash=block_hash(number),
            coinbase=coinbase,
            parent_hash=block_hash(number - 1) if number else None,
        ),
        uncles=tuple(
            BlockHeader(number=number - 1, hash=block_hash(number - 1, salt=i + 1), coinbase=UNCLE_MINERS[i])
            for i in range(uncles)
        ),
    )


class FakeChain:
    """In-memory ChainReader"""

    def __init__(self, blocks: Sequence[Block], pending: Block | None = None, chain_config: Any = None):
        self.blocks = {block.number: block for block in blocks}
        self.pending = pending
        self.chain_config = chain_config if chain_config is not None else {"chainId": 1}

    async def get_block_by_number(self, number: int) -> Block | None:
        return self.blocks.get(number)

    async def current_block(self) -> Block | None:
        if not self.blocks:
            return None
        return self.blocks[max(self.blocks)]

    async def pending_block(self) -> Block | None:
        return self.pending


class RecordingRewards:
    """ConsensusRewards returning configured rewards, and recording every lookup"""

    def __init__(self, miner_reward: int, uncle_rewards: Sequence[int] = ()):
        self.miner_reward = miner_reward
        self.uncle_rewards = list(uncle_rewards)
        self.calls: list[tuple[Any, BlockHeader, Sequence[BlockHeader]]] = []

    def get_rewards(self, chain_config, header, uncles):
        self.calls.append((chain_config, header, uncles))
        return self.miner_reward, self.uncle_rewards


class FakeTracer:
    """In-memory ExecutionTracer.  Records the arguments of every call"""

    def __init__(
        self,
        block_traces: dict[Any, list[TxTraceResult]] | None = None,
        transaction_result: Any = None,
        call_result: Any = None,
        call_many_result: Any = None,
        error: Exception | None = None,
        chain_delay: float = 0,
    ):
        self.block_traces = block_traces or {}
        self.transaction_result = transaction_result
        self.call_result = call_result
        self.call_many_result = call_many_result
        self.error = error
        self.chain_delay = chain_delay
        self.calls: list[tuple[str, tuple]] = []

    def _record(self, method: str, *args):
        self.calls.append((method, args))
        if self.error:
            raise self.error

    async def trace_block_by_number(self, block, config: TraceConfig) -> list[TxTraceResult]:
        self._record("trace_block_by_number", block, config)
        return self.block_traces.get(block, [])

    async def trace_transaction(self, tx_hash, config: TraceConfig) -> Any:
        self._record("trace_transaction", tx_hash, config)
        return self.transaction_result

    async def trace_chain(self, start: Block, end: Block, config: TraceConfig):
        self._record("trace_chain", start, end, config)
        for number in range(start.number + 1, end.number + 1):
            if self.chain_delay:
                await asyncio.sleep(self.chain_delay)
            yield BlockTraceNotification(
                block=number,
                hash=block_hash(number),
                traces=self.block_traces.get(number, []),
            )

    async def trace_call(self, args: CallArgs, block, config: TraceConfig) -> Any:
        self._record("trace_call", args, block, config)
        return self.call_result

    async def trace_call_many(self, args: Sequence[CallArgs], block, config: TraceConfig) -> Any:
        self._record("trace_call_many", args, block, config)
        return self.call_many_result
