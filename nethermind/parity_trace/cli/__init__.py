import click

from nethermind.parity_trace.cli.trace import block, call, filter_, transaction


@click.group()
def parity_trace_cli():
    """Command Line Interface for Parity formatted execution traces"""


# Adding Commands
parity_trace_cli.add_command(block, name="block")
parity_trace_cli.add_command(transaction, name="transaction")
parity_trace_cli.add_command(filter_, name="filter")
parity_trace_cli.add_command(call, name="call")
