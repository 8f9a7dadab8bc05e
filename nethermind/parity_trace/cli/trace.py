import asyncio
import logging
from typing import Any, Awaitable, Callable

import click

from nethermind.parity_trace.api import ParityTraceAPI
from nethermind.parity_trace.cli.utils import (
    block_reward_option,
    cli_logger_config,
    echo_json,
    from_block_option,
    group_options,
    json_rpc_option,
    nested_option,
    timeout_option,
    to_block_option,
    tracer_option,
    uncle_reward_option,
    verbose_option,
)
from nethermind.parity_trace.config import TraceAPISettings
from nethermind.parity_trace.exceptions import TraceError
from nethermind.parity_trace.rpc.backend import JsonRpcBackend
from nethermind.parity_trace.tracing.rewards import FixedRewards
from nethermind.parity_trace.types.trace import CallArgs, TraceConfig, TraceFilterArgs
from nethermind.parity_trace.utils import parse_block_identifier, parse_block_reference

# pylint: disable=too-many-arguments

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("parity_trace").getChild("cli").getChild("trace")

common_options = group_options(
    json_rpc_option,
    tracer_option,
    timeout_option,
    verbose_option,
)


def _run_with_api(
    json_rpc: str | None,
    verbose: bool,
    handler: Callable[[ParityTraceAPI], Awaitable[Any]],
    block_reward: int = 0,
    uncle_rewards: tuple[int, ...] = (),
):
    cli_logger_config(root_logger, logging.DEBUG if verbose else logging.INFO)

    settings = TraceAPISettings.from_env()
    json_rpc = json_rpc or settings.json_rpc
    if not json_rpc:
        raise click.UsageError("--json-rpc or the JSON_RPC environment variable must be set")

    async def _run():
        async with JsonRpcBackend(json_rpc, request_timeout=settings.request_timeout) as backend:
            api = ParityTraceAPI(
                chain=backend,
                tracer=backend,
                consensus=FixedRewards(block_reward, uncle_rewards),
                settings=settings,
            )
            return await handler(api)

    try:
        return asyncio.run(_run())
    except TraceError as e:
        logger.error(e)
        raise SystemExit(1)  # pylint: disable=raise-missing-from


@click.command()
@click.argument("block_id")
@group_options(common_options, block_reward_option, uncle_reward_option)
def block(block_id, json_rpc, tracer, timeout, verbose, block_reward, uncle_rewards):
    """Trace every transaction in a block, including block and uncle rewards"""
    try:
        block_identifier = parse_block_identifier(block_id)
    except (ValueError, NotImplementedError) as e:
        raise click.BadParameter(str(e), param_hint="BLOCK_ID") from e

    config = TraceConfig(tracer=tracer, timeout=timeout)
    result = _run_with_api(
        json_rpc,
        verbose,
        lambda api: api.block(block_identifier, config),
        block_reward=block_reward,
        uncle_rewards=uncle_rewards,
    )
    echo_json(result)


@click.command()
@click.argument("tx_hash")
@common_options
def transaction(tx_hash, json_rpc, tracer, timeout, verbose):
    """Trace a single transaction"""
    config = TraceConfig(tracer=tracer, timeout=timeout)
    echo_json(_run_with_api(json_rpc, verbose, lambda api: api.transaction(tx_hash, config)))


@click.command(name="filter")
@group_options(common_options, from_block_option, to_block_option)
def filter_(from_block, to_block, json_rpc, tracer, timeout, verbose):
    """Trace a range of blocks, writing one JSON document per traced block"""
    config = TraceConfig(tracer=tracer, timeout=timeout)
    args = TraceFilterArgs(from_block=from_block, to_block=to_block)

    async def _stream(api: ParityTraceAPI):
        async with await api.filter(args, config) as subscription:
            async for notification in subscription:
                echo_json(notification.to_json())

    _run_with_api(json_rpc, verbose, _stream)


@click.command()
@click.option("--from", "from_address", default=None, help="Sender of the call")
@click.option("--to", "to", required=True, help="Called address")
@click.option("--data", "data", default=None, help="0x-prefixed calldata")
@click.option("--value", "value", type=click.IntRange(min=0), default=None, help="Value in wei")
@click.option("--gas", "gas", type=click.IntRange(min=0), default=None, help="Gas limit")
@click.option("--block", "block_ref", default="latest", show_default=True, help="Block number, tag or hash")
@group_options(common_options, nested_option)
def call(from_address, to, data, value, gas, block_ref, json_rpc, tracer, timeout, verbose, nested_trace_output):
    """Trace a call executed on top of a block"""
    try:
        block_reference = parse_block_reference(block_ref)
        args = CallArgs.from_json({"from": from_address, "to": to, "data": data, "value": value, "gas": gas})
    except (ValueError, NotImplementedError) as e:
        raise click.BadParameter(str(e)) from e

    config = TraceConfig(tracer=tracer, timeout=timeout, nested_trace_output=nested_trace_output)
    echo_json(_run_with_api(json_rpc, verbose, lambda api: api.call(args, block_reference, config)))
