import json
import logging
import os
from logging import Logger
from typing import Any

import click
from rich.console import Console
from rich.logging import RichHandler

from nethermind.parity_trace.config import DEFAULT_TRACER
from nethermind.parity_trace.utils import HexEnabledJsonEncoder

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("parity_trace").getChild("cli")


def cli_logger_config(instrument_logger: Logger, level: int = logging.INFO) -> Console:
    # Logs are written to stderr, keeping stdout for JSON output
    rich_console = Console(stderr=True)
    instrument_logger.handlers.clear()

    instrument_logger.addHandler(RichHandler(show_path=False, console=rich_console))
    instrument_logger.setLevel(level)
    return rich_console


def echo_json(value: Any):
    """Writes a JSON result to stdout"""
    click.echo(json.dumps(value, indent=2, cls=HexEnabledJsonEncoder))


def group_options(*options):
    """Decorator to group multiple click options together"""

    def wrapper(function):
        for option in reversed(options):
            function = option(function)
        return function

    return wrapper


# -------------------------------------------------------
#    Connections and Configurations
# -------------------------------------------------------
json_rpc_option = click.option(
    "--json-rpc",
    "-rpc",
    "json_rpc",
    default=os.environ.get("JSON_RPC"),
    help="Upstream node RPC url.  If not provided, will use the JSON_RPC environment variable",
)
verbose_option = click.option(
    "--verbose",
    "-v",
    "verbose",
    is_flag=True,
    default=False,
    help="Log debug messages",
)


# -------------------------------------------------------
#    Tracer Options
# -------------------------------------------------------
tracer_option = click.option(
    "--tracer",
    "tracer",
    default=None,
    help=f"Tracer to run.  If not provided, defaults to {DEFAULT_TRACER} or the PARITY_TRACE_DEFAULT_TRACER "
    "environment variable",
)
nested_option = click.option(
    "--nested",
    "nested_trace_output",
    is_flag=True,
    default=False,
    help="Nest trace_call results under the Parity output key for the tracer",
)
timeout_option = click.option(
    "--timeout",
    "timeout",
    default=None,
    help="Tracer timeout passed to the upstream node, ie. '10s'",
)


# -------------------------------------------------------
#    Reward Options
# -------------------------------------------------------
block_reward_option = click.option(
    "--block-reward",
    "block_reward",
    type=click.IntRange(min=0),
    default=0,
    show_default=True,
    help="Miner reward in wei reported in block reward traces",
)
uncle_reward_option = click.option(
    "--uncle-reward",
    "uncle_rewards",
    type=click.IntRange(min=0),
    multiple=True,
    help="Reward in wei for each uncle, in uncle order.  Uncles without a reward are not reported",
)


# -------------------------------------------------------
#    Range Parameters
# -------------------------------------------------------
from_block_option = click.option(
    "--from-block",
    "-from",
    "from_block",
    type=click.IntRange(min=0),
    required=True,
    help="Start block of the traced range",
)
to_block_option = click.option(
    "--to-block",
    "-to",
    "to_block",
    type=click.IntRange(min=0),
    required=True,
    help="End block of the traced range.  Must come after the start block",
)
