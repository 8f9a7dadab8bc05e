import logging

from nethermind.parity_trace.exceptions import BlockNotFound, InvalidBlockRange
from nethermind.parity_trace.tracing.subscription import TraceSubscription
from nethermind.parity_trace.tracing.tracer_config import TracerConfigResolver
from nethermind.parity_trace.types.chain import Block, ChainReader, ExecutionTracer
from nethermind.parity_trace.types.trace import TraceConfig, TraceFilterArgs

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("parity_trace").getChild("chain")


class ChainTraceDispatcher:
    """Validates trace_filter block ranges, and starts streamed range traces"""

    def __init__(
        self,
        chain: ChainReader,
        tracer: ExecutionTracer,
        config_resolver: TracerConfigResolver,
        buffer_size: int = 128,
    ):
        self.chain = chain
        self.tracer = tracer
        self.config_resolver = config_resolver
        self.buffer_size = buffer_size

    async def validate_range(self, args: TraceFilterArgs) -> tuple[Block, Block]:
        """
        Fetches the start and end blocks of a range.  The end block must have a greater block number than the
        start block.

        :raises BlockNotFound: if either endpoint does not exist
        :raises InvalidBlockRange: if the end block does not come after the start block
        """
        start, end = args.from_block, args.to_block

        from_block = await self.chain.get_block_by_number(start)
        to_block = await self.chain.get_block_by_number(end)

        if from_block is None:
            raise BlockNotFound(f"starting block #{start} not found", block=start, endpoint="start")
        if to_block is None:
            raise BlockNotFound(f"end block #{end} not found", block=end, endpoint="end")
        if from_block.number >= to_block.number:
            raise InvalidBlockRange(
                f"end block (#{end}) needs to come after start block (#{start})",
                from_block=start,
                to_block=end,
            )

        return from_block, to_block

    async def start(self, args: TraceFilterArgs, config: TraceConfig | None = None) -> TraceSubscription:
        """
        Validates the range of a trace_filter request, and starts tracing it in the background.  Returns once the
        trace has started, without waiting for any block to be traced.

        :param args: trace_filter arguments
        :param config: trace config from the request
        :return: subscription streaming one notification per traced block
        """
        config = self.config_resolver.resolve(config)
        from_block, to_block = await self.validate_range(args)

        if args.from_address or args.to_address or args.after or args.count:
            logger.debug("Address filters and pagination are not applied to range traces")

        subscription = TraceSubscription(
            self.tracer.trace_chain(from_block, to_block, config),
            buffer_size=self.buffer_size,
        )
        logger.info(
            f"Started range trace {subscription.id} for blocks ({from_block.number} - {to_block.number}) "
            f"with tracer {config.tracer}"
        )
        return subscription
