from typing import Any

from nethermind.parity_trace.config import CALL_TRACER_PARITY, STATE_DIFF_TRACER
from nethermind.parity_trace.types.trace import TraceConfig

NESTED_OUTPUT_KEYS = {
    CALL_TRACER_PARITY: "trace",
    STATE_DIFF_TRACER: "stateDiff",
}


def decorate_response(result: Any, config: TraceConfig | None) -> Any:
    """
    Applies Parity output formatting to a trace result.  When nested output is requested, results are placed under
    the key Parity uses for the tracer:

    >>> decorate_response([...], TraceConfig(tracer="callTracerParity", nested_trace_output=True))
    {"trace": [...]}

    Results of other tracers, and results for configs without nested output are returned unchanged.

    Docs: https://openethereum.github.io/JSONRPC-trace-module

    :param result: Result returned by the tracer
    :param config: Resolved trace config
    :return:
    """
    if config is None or not config.nested_trace_output or config.tracer is None:
        return result

    key = NESTED_OUTPUT_KEYS.get(config.tracer)
    if key is None:
        return result
    return {key: result}
