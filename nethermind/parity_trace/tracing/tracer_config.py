from dataclasses import replace

from nethermind.parity_trace.config import DEFAULT_TRACER
from nethermind.parity_trace.types.trace import TraceConfig


class TracerConfigResolver:
    """Fills in the default tracer for requests that do not select one"""

    def __init__(self, default_tracer: str = DEFAULT_TRACER):
        self.default_tracer = default_tracer

    def resolve(self, config: TraceConfig | None) -> TraceConfig:
        """
        Returns a config with a tracer set.  Missing configs are replaced with an empty config, and a tracer
        supplied by the caller is never replaced.

        :param config: Trace config from the request, or None
        :return: TraceConfig with ``tracer`` set
        """
        if config is None:
            config = TraceConfig()

        if config.tracer is None:
            config = replace(config, tracer=self.default_tracer)

        return config
