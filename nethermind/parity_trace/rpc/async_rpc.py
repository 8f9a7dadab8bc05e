import itertools
import logging
from typing import Any

import aiohttp
from aiohttp.client_exceptions import ClientError, ContentTypeError

from nethermind.parity_trace.exceptions import (
    UpstreamHostError,
    UpstreamRateLimitError,
    UpstreamTracerError,
)

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("parity_trace").getChild("rpc").getChild("async")

DEFAULT_HEADERS = {"Content-Type": "application/json"}

_request_ids = itertools.count(1)

# pylint: disable=raise-missing-from


def build_request(method: str, params: list[Any]) -> dict[str, Any]:
    """Builds a JSON-RPC 2.0 request object"""
    return {"jsonrpc": "2.0", "id": next(_request_ids), "method": method, "params": params}


def _handle_rpc_error(response_json: dict[str, Any]) -> None:
    if "error" in response_json.keys():
        logger.debug(f"Error in RPC response: {response_json}")
        error = response_json["error"]
        message = error.get("message", error) if isinstance(error, dict) else error
        raise UpstreamTracerError(f"Error in RPC response: {message}")


async def post_request(
    session: aiohttp.ClientSession,
    host_address: str,
    method: str,
    params: list[Any],
) -> Any:
    """
    Sends a single JSON-RPC request and returns its result.

    :param session: aiohttp client session
    :param host_address: upstream node URL
    :param method: JSON-RPC method
    :param params: method parameters
    :return: ``result`` field of the response
    :raises UpstreamRateLimitError: on 429 responses
    :raises UpstreamHostError: on server errors and malformed responses
    :raises UpstreamTracerError: if the response contains an error object
    """
    request = build_request(method, params)
    logger.debug(f"Sending {method} request to {host_address}")

    try:
        async with session.post(host_address, json=request) as response:
            try:
                response_json = await response.json()
            except ContentTypeError:
                match response.status:
                    case 1015 | 429:
                        raise UpstreamRateLimitError("JSON RPC Server Initializing Rate Limits")
                    case 500 | 502 | 503 | 504:
                        raise UpstreamHostError(f"Internal Server Error ({response.status})")
                    case _:
                        logger.error(f"Unexpected response to {method} request.  Status Code: {response.status}")
                        logger.error(await response.text())
                        raise UpstreamHostError(f"Unexpected Content Type in response to {method}")
    except ClientError as e:
        raise UpstreamHostError(f"Could not reach RPC host {host_address}: {e}")

    if not isinstance(response_json, dict):
        raise UpstreamHostError(f"Malformed response to {method}: {response_json}")

    _handle_rpc_error(response_json)
    try:
        return response_json["result"]
    except KeyError:
        raise UpstreamHostError(f"Response to {method} is missing a result: {response_json}")
