from typing import Any


class TraceError(Exception):
    """

    Base class for all errors raised while serving Parity formatted trace requests

    """


class BlockNotFound(TraceError):
    """
    Raised when a requested block does not exist.  The following lookups can raise this error:

        * Block traces for a block number, or the ``latest`` and ``pending`` identifiers
        * The start or end block of a trace filter range

    """

    def __init__(self, message: str, block: Any, endpoint: str | None = None):
        super().__init__(message)
        self.block = block
        self.endpoint = endpoint


class InvalidBlockRange(TraceError):
    """Raised when the end of a trace filter range does not come after its start"""

    def __init__(self, message: str, from_block: int, to_block: int):
        super().__init__(message)
        self.from_block = from_block
        self.to_block = to_block


class UpstreamTracerError(TraceError):
    """
    Raised when the execution tracer, the consensus reward source, or the upstream node fails.  These errors are
    passed to the caller as-is, and are never retried.
    """


class UpstreamRateLimitError(UpstreamTracerError):
    """Raised when gateway rate limits are implemented by the upstream node"""


class UpstreamHostError(UpstreamTracerError):
    """Raised when the upstream node returns a server error, or fails to provide correctly formatted data"""


class TraceDecodingError(TraceError):
    """

    Raised when a transaction trace returned by the tracer cannot be decoded while assembling a block trace

    """
