import os
from dataclasses import dataclass

CALL_TRACER_PARITY = "callTracerParity"
STATE_DIFF_TRACER = "stateDiffTracer"

DEFAULT_TRACER = CALL_TRACER_PARITY
"""Tracer used when a request does not specify one"""


@dataclass(slots=True)
class TraceAPISettings:
    """Deployment settings for the Parity trace API"""

    default_tracer: str = DEFAULT_TRACER
    """ Tracer selected for requests that do not name a tracer """

    json_rpc: str | None = None
    """ Upstream node URL used by the JSON-RPC backend """

    subscription_buffer: int = 128
    """ Maximum number of range trace notifications queued before the producer waits for the consumer """

    request_timeout: float | None = None
    """ Total timeout in seconds for upstream JSON-RPC requests.  None leaves deadlines to the caller """

    @classmethod
    def from_env(cls) -> "TraceAPISettings":
        """
        Loads settings from the environment.

            * ``PARITY_TRACE_DEFAULT_TRACER``
            * ``JSON_RPC``
            * ``PARITY_TRACE_SUBSCRIPTION_BUFFER``
            * ``PARITY_TRACE_REQUEST_TIMEOUT``

        """
        timeout = os.environ.get("PARITY_TRACE_REQUEST_TIMEOUT")
        settings = cls(
            default_tracer=os.environ.get("PARITY_TRACE_DEFAULT_TRACER") or DEFAULT_TRACER,
            json_rpc=os.environ.get("JSON_RPC"),
            subscription_buffer=int(os.environ.get("PARITY_TRACE_SUBSCRIPTION_BUFFER", 128)),
            request_timeout=float(timeout) if timeout else None,
        )
        if settings.subscription_buffer <= 0:
            raise ValueError("PARITY_TRACE_SUBSCRIPTION_BUFFER must be a positive integer")
        return settings
