import logging
from typing import Any, Sequence

from eth_typing import HexStr

from nethermind.parity_trace.config import TraceAPISettings
from nethermind.parity_trace.tracing.block import BlockTraceAggregator
from nethermind.parity_trace.tracing.chain import ChainTraceDispatcher
from nethermind.parity_trace.tracing.decorate import decorate_response
from nethermind.parity_trace.tracing.rewards import RewardSynthesizer
from nethermind.parity_trace.tracing.subscription import TraceSubscription
from nethermind.parity_trace.tracing.tracer_config import TracerConfigResolver
from nethermind.parity_trace.types import BlockIdentifier, BlockReference
from nethermind.parity_trace.types.chain import (
    ChainReader,
    ConsensusRewards,
    ExecutionTracer,
)
from nethermind.parity_trace.types.trace import (
    CallArgs,
    TraceConfig,
    TraceFilterArgs,
)

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("parity_trace").getChild("api")


class ParityTraceAPI:
    """
    Parity/OpenEthereum compatible trace module.

    Each handler maps to a trace_* JSON-RPC method:

        * ``trace_block`` -> :meth:`block`
        * ``trace_transaction`` -> :meth:`transaction`
        * ``trace_filter`` -> :meth:`filter`
        * ``trace_call`` -> :meth:`call`
        * ``trace_callMany`` -> :meth:`call_many`

    Handlers return JSON serializable values.  Errors raised by the chain, tracer, or reward source are passed
    through to the caller.
    """

    def __init__(
        self,
        chain: ChainReader,
        tracer: ExecutionTracer,
        consensus: ConsensusRewards,
        settings: TraceAPISettings | None = None,
    ):
        self.settings = settings or TraceAPISettings()
        self.tracer = tracer

        self.config_resolver = TracerConfigResolver(default_tracer=self.settings.default_tracer)
        self.block_aggregator = BlockTraceAggregator(
            chain=chain,
            tracer=tracer,
            rewards=RewardSynthesizer(chain, consensus),
            config_resolver=self.config_resolver,
        )
        self.chain_dispatcher = ChainTraceDispatcher(
            chain=chain,
            tracer=tracer,
            config_resolver=self.config_resolver,
            buffer_size=self.settings.subscription_buffer,
        )

    async def block(self, block_id: BlockIdentifier, config: TraceConfig | None = None) -> list[Any]:
        """Returns the transaction traces and reward traces of a block as a flat list"""
        records = await self.block_aggregator.trace_block(block_id, config)
        return [record.to_json() for record in records]

    async def transaction(self, tx_hash: HexStr, config: TraceConfig | None = None) -> Any:
        """Returns the trace of a single transaction.  Rewards are not included"""
        config = self.config_resolver.resolve(config)
        return await self.tracer.trace_transaction(tx_hash, config)

    async def filter(self, args: TraceFilterArgs, config: TraceConfig | None = None) -> TraceSubscription:
        """Starts tracing a block range, returning a subscription that streams one notification per block"""
        return await self.chain_dispatcher.start(args, config)

    async def call(self, args: CallArgs, block: BlockReference, config: TraceConfig | None = None) -> Any:
        """Traces a hypothetical transaction on top of a block"""
        config = self.config_resolver.resolve(config)
        result = await self.tracer.trace_call(args, block, config)
        return decorate_response(result, config)

    async def call_many(
        self,
        args: Sequence[CallArgs],
        block: BlockReference,
        config: TraceConfig | None = None,
    ) -> Any:
        """
        Traces a batch of hypothetical transactions on top of a block.

        .. note::
            Unlike :meth:`call`, results are returned without nested output formatting
        """
        config = self.config_resolver.resolve(config)
        return await self.tracer.trace_call_many(args, block, config)
