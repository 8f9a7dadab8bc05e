import json
import logging
from typing import Any

from nethermind.parity_trace.exceptions import (
    BlockNotFound,
    TraceDecodingError,
    UpstreamTracerError,
)
from nethermind.parity_trace.tracing.rewards import RewardSynthesizer
from nethermind.parity_trace.tracing.tracer_config import TracerConfigResolver
from nethermind.parity_trace.types import BlockIdentifier
from nethermind.parity_trace.types.chain import Block, ChainReader, ExecutionTracer
from nethermind.parity_trace.types.trace import (
    TraceConfig,
    TraceRecord,
    TransactionTrace,
    TxTraceResult,
)

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("parity_trace").getChild("block")


async def resolve_block(chain: ChainReader, block_id: BlockIdentifier) -> Block:
    """
    Fetches the block for a block identifier.  'pending' resolves to the block the node is building, 'latest' to the
    head of the chain, and block numbers (and 'earliest') to the canonical block at that height.

    :raises BlockNotFound: if no block exists for the identifier
    """
    match block_id:
        case "pending":
            block = await chain.pending_block()
        case "latest":
            block = await chain.current_block()
        case "earliest":
            block = await chain.get_block_by_number(0)
        case _:
            block = await chain.get_block_by_number(block_id)

    if block is None:
        raise BlockNotFound(f"block #{block_id} not found", block=block_id)

    logger.debug(f"Resolved block identifier {block_id} to block {block.number} ({block.hash})")
    return block


def decode_transaction_trace(tx_result: TxTraceResult, tx_index: int) -> list[Any]:
    """
    Decodes the result of a single transaction trace into a list of trace entries.  Raw JSON bytes are decoded,
    any other value was already decoded by the tracer client.  Arrays are split into their elements, null results
    add no entries, and any other result is a single entry.

    :param tx_result: Result returned by the tracer for the transaction
    :param tx_index: Position of the transaction in the block
    :return: trace entries for the transaction
    """
    if tx_result.error:
        raise UpstreamTracerError(f"Tracing transaction #{tx_index} failed: {tx_result.error}")

    payload = tx_result.result
    if isinstance(payload, (bytes, bytearray)):
        try:
            payload = json.loads(payload)
        except ValueError as e:
            raise TraceDecodingError(f"Could not decode trace of transaction #{tx_index}: {e}") from e

    if payload is None:
        return []
    if isinstance(payload, list):
        return payload
    return [payload]


class BlockTraceAggregator:
    """Assembles Parity block traces from transaction traces and synthesized reward traces"""

    def __init__(
        self,
        chain: ChainReader,
        tracer: ExecutionTracer,
        rewards: RewardSynthesizer,
        config_resolver: TracerConfigResolver,
    ):
        self.chain = chain
        self.tracer = tracer
        self.rewards = rewards
        self.config_resolver = config_resolver

    async def trace_block(self, block_id: BlockIdentifier, config: TraceConfig | None = None) -> list[TraceRecord]:
        """
        Traces every transaction in a block, and appends the block reward and uncle rewards.  The output is ordered
        as transaction traces (in block order, flattened), the block reward, then uncle rewards in uncle order.

        Any failure aborts the whole trace.

        :param block_id: block number, 'latest' or 'pending'
        :param config: trace config from the request
        :return: ordered list of trace records
        """
        block = await resolve_block(self.chain, block_id)
        config = self.config_resolver.resolve(config)

        # 'latest' is pinned to the resolved block so rewards and traces describe the same block
        trace_target: BlockIdentifier = "pending" if block_id == "pending" else block.number
        tx_results = await self.tracer.trace_block_by_number(trace_target, config)

        block_reward, uncle_rewards = self.rewards.rewards(block)

        records: list[TraceRecord] = []
        for tx_index, tx_result in enumerate(tx_results):
            records.extend(TransactionTrace(entry) for entry in decode_transaction_trace(tx_result, tx_index))

        records.append(block_reward)
        records.extend(uncle_rewards)

        logger.debug(
            f"Traced block {block.number}: {len(tx_results)} transactions, {len(records)} traces, "
            f"{len(uncle_rewards)} uncle rewards"
        )
        return records
