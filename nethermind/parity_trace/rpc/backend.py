import asyncio
import logging
from typing import Any, AsyncIterator, Sequence

import aiohttp
from eth_typing import HexStr
from eth_utils import to_checksum_address, to_hex

from nethermind.parity_trace.exceptions import UpstreamHostError, UpstreamTracerError
from nethermind.parity_trace.rpc.async_rpc import DEFAULT_HEADERS, post_request
from nethermind.parity_trace.types import BlockIdentifier, BlockReference
from nethermind.parity_trace.types.chain import Block, BlockHeader
from nethermind.parity_trace.types.trace import (
    BlockTraceNotification,
    CallArgs,
    TraceConfig,
    TxTraceResult,
)
from nethermind.parity_trace.utils import block_reference_to_param, parse_quantity

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("parity_trace").getChild("rpc").getChild("backend")

ZERO_HASH = HexStr("0x" + "00" * 32)


def rpc_response_to_header(header_json: dict[str, Any]) -> BlockHeader:
    """Converts an eth_getBlockByNumber or eth_getUncle* response into a BlockHeader"""
    try:
        return BlockHeader(
            number=parse_quantity(header_json["number"]),
            # Pending blocks are returned without a hash
            hash=HexStr(header_json.get("hash") or ZERO_HASH),
            coinbase=to_checksum_address(header_json["miner"]),
            parent_hash=header_json.get("parentHash"),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise UpstreamHostError(f"Malformed block header in RPC response: {e}") from e


def rpc_response_to_tx_trace(trace_json: Any) -> TxTraceResult:
    """Converts one entry of a debug_traceBlockByNumber response into a TxTraceResult"""
    if not isinstance(trace_json, dict):
        raise UpstreamHostError(f"Malformed transaction trace in RPC response: {trace_json}")
    return TxTraceResult(result=trace_json.get("result"), error=trace_json.get("error"))


class JsonRpcBackend:
    """
    Chain reader and execution tracer backed by an upstream node's eth_* and debug_* JSON-RPC methods.

    >>> async with JsonRpcBackend("http://localhost:8545") as backend:
    ...     api = ParityTraceAPI(chain=backend, tracer=backend, consensus=FixedRewards())
    ...     await api.block(17_000_000)

    """

    def __init__(
        self,
        json_rpc: str,
        chain_config: Any = None,
        session: aiohttp.ClientSession | None = None,
        request_timeout: float | None = None,
    ):
        self.json_rpc = json_rpc
        self.chain_config = chain_config
        self.request_timeout = request_timeout

        self._session = session
        self._owns_session = session is None

    @property
    def session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession(
                headers=DEFAULT_HEADERS,
                timeout=aiohttp.ClientTimeout(total=self.request_timeout),
            )
        return self._session

    async def close(self):
        """Closes the aiohttp session if it was created by the backend"""
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "JsonRpcBackend":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _request(self, method: str, params: list[Any]) -> Any:
        return await post_request(self.session, self.json_rpc, method, params)

    # -------------------------------------------------------
    #    Chain Reader
    # -------------------------------------------------------
    async def _get_block(self, block_param: str) -> Block | None:
        block_json = await self._request("eth_getBlockByNumber", [block_param, False])
        if block_json is None:
            return None

        header = rpc_response_to_header(block_json)
        uncle_count = len(block_json.get("uncles") or [])
        uncle_jsons = await asyncio.gather(
            *[
                self._request("eth_getUncleByBlockNumberAndIndex", [block_param, to_hex(index)])
                for index in range(uncle_count)
            ]
        )
        if any(uncle_json is None for uncle_json in uncle_jsons):
            raise UpstreamHostError(f"Uncles of block {header.number} are unavailable")

        return Block(header=header, uncles=tuple(rpc_response_to_header(uncle) for uncle in uncle_jsons))

    async def get_block_by_number(self, number: int) -> Block | None:
        return await self._get_block(to_hex(number))

    async def current_block(self) -> Block | None:
        return await self._get_block("latest")

    async def pending_block(self) -> Block | None:
        return await self._get_block("pending")

    # -------------------------------------------------------
    #    Execution Tracer
    # -------------------------------------------------------
    async def trace_block_by_number(self, block: BlockIdentifier, config: TraceConfig) -> list[TxTraceResult]:
        response = await self._request(
            "debug_traceBlockByNumber",
            [block_reference_to_param(block), config.to_json()],
        )
        if not isinstance(response, list):
            raise UpstreamHostError(f"Expected a list of transaction traces for block {block}, got {response}")
        return [rpc_response_to_tx_trace(trace) for trace in response]

    async def trace_transaction(self, tx_hash: HexStr, config: TraceConfig) -> Any:
        return await self._request("debug_traceTransaction", [tx_hash, config.to_json()])

    async def trace_chain(self, start: Block, end: Block, config: TraceConfig) -> AsyncIterator[BlockTraceNotification]:
        """
        Traces the blocks after ``start`` up to and including ``end``.  The start block provides the base state
        for the range, and is not traced itself.
        """
        for number in range(start.number + 1, end.number + 1):
            block = await self.get_block_by_number(number)
            if block is None:
                raise UpstreamTracerError(f"block #{number} not found while tracing chain")

            traces = await self.trace_block_by_number(number, config)
            logger.debug(f"Traced block {number} with {len(traces)} transactions")
            yield BlockTraceNotification(block=number, hash=block.hash, traces=traces)

    async def trace_call(self, args: CallArgs, block: BlockReference, config: TraceConfig) -> Any:
        return await self._request(
            "debug_traceCall",
            [args.to_json(), block_reference_to_param(block), config.to_json()],
        )

    async def trace_call_many(self, args: Sequence[CallArgs], block: BlockReference, config: TraceConfig) -> Any:
        return await self._request(
            "debug_traceCallMany",
            [[call.to_json() for call in args], block_reference_to_param(block), config.to_json()],
        )
