import asyncio
import os

import pytest
from dotenv import load_dotenv

from nethermind.parity_trace.api import ParityTraceAPI
from nethermind.parity_trace.rpc.backend import JsonRpcBackend
from nethermind.parity_trace.tracing.rewards import FixedRewards


@pytest.fixture(scope="session")
def json_rpc() -> str:
    load_dotenv()

    rpc_url = os.environ.get("JSON_RPC")
    if not rpc_url:
        pytest.skip("JSON_RPC not set.  Integration tests require a node exposing the debug namespace")
    return rpc_url


@pytest.fixture(name="run_with_api")
def fixture_run_with_api(json_rpc):
    def _run_with_api(handler):
        async def _run():
            async with JsonRpcBackend(json_rpc, request_timeout=120) as backend:
                api = ParityTraceAPI(chain=backend, tracer=backend, consensus=FixedRewards())
                return await handler(api, backend)

        return asyncio.run(_run())

    return _run_with_api
