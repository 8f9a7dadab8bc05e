import asyncio
import json

import pytest

from nethermind.parity_trace.api import ParityTraceAPI
from nethermind.parity_trace.config import TraceAPISettings
from nethermind.parity_trace.exceptions import BlockNotFound, InvalidBlockRange, UpstreamTracerError
from nethermind.parity_trace.types.trace import (
    CallArgs,
    TraceConfig,
    TraceFilterArgs,
    TxTraceResult,
)
from tests.utils import BLOCK_REWARD, MINER, UNCLE_MINERS, UNCLE_REWARD, FakeTracer, block_hash

CALL = CallArgs.from_json({"to": "0x6b175474e89094c44da98b954eedeac495271d0f", "data": "0x18160ddd"})


@pytest.fixture(name="api")
def fixture_api(chain, tracer, rewards):
    return ParityTraceAPI(chain=chain, tracer=tracer, consensus=rewards)


def test_trace_block_wire_format(api):
    result = asyncio.run(api.block(100))

    assert result[:3] == [{"id": "a"}, {"id": "b"}, {"id": "c"}]
    assert result[3] == {
        "action": {"value": hex(BLOCK_REWARD), "author": MINER.lower(), "rewardType": "block"},
        "blockHash": block_hash(100),
        "blockNumber": 100,
        "result": None,
        "subtraces": 0,
        "traceAddress": [],
        "transactionHash": None,
        "transactionPosition": None,
        "type": "reward",
    }
    assert result[4]["action"] == {
        "value": hex(UNCLE_REWARD),
        "author": UNCLE_MINERS[0].lower(),
        "rewardType": "uncle",
    }
    assert len(result) == 5

    # Output is JSON serializable as-is
    assert json.loads(json.dumps(result)) == result


def test_trace_block_not_found(api):
    with pytest.raises(BlockNotFound, match="block #999999 not found"):
        asyncio.run(api.block(999_999))


def test_trace_transaction_has_no_rewards(api, tracer):
    tracer.transaction_result = [{"type": "call", "transactionHash": "0x01"}]
    tx_hash = "0x" + "ab" * 32

    result = asyncio.run(api.transaction(tx_hash))

    assert result == [{"type": "call", "transactionHash": "0x01"}]
    method, (traced_hash, config) = tracer.calls[0]
    assert (method, traced_hash) == ("trace_transaction", tx_hash)
    assert config == TraceConfig(tracer="callTracerParity")


def test_trace_transaction_errors_are_passed_through(chain, rewards):
    api = ParityTraceAPI(chain, FakeTracer(error=UpstreamTracerError("transaction not found")), rewards)

    with pytest.raises(UpstreamTracerError, match="transaction not found"):
        asyncio.run(api.transaction("0x" + "00" * 32))


def test_trace_filter(api):
    async def _run():
        subscription = await api.filter(TraceFilterArgs.from_json({"fromBlock": "0x63", "toBlock": "0x64"}))
        async with subscription:
            return [notification.to_json() async for notification in subscription]

    notifications = asyncio.run(_run())

    assert notifications == [
        {
            "block": "0x64",
            "hash": block_hash(100),
            "traces": [{"result": [{"id": "a"}]}, {"result": [{"id": "b"}, {"id": "c"}]}],
        }
    ]


def test_trace_filter_invalid_range(api):
    with pytest.raises(InvalidBlockRange):
        asyncio.run(api.filter(TraceFilterArgs(from_block=100, to_block=100)))


def test_trace_call_is_decorated(api, tracer):
    tracer.call_result = [{"type": "call", "subtraces": 0}]

    plain = asyncio.run(api.call(CALL, "latest"))
    nested = asyncio.run(api.call(CALL, 100, TraceConfig(nested_trace_output=True)))
    state_diff = asyncio.run(api.call(CALL, 100, TraceConfig(tracer="stateDiffTracer", nested_trace_output=True)))
    other = asyncio.run(api.call(CALL, 100, TraceConfig(tracer="callTracer", nested_trace_output=True)))

    assert plain == [{"type": "call", "subtraces": 0}]
    assert nested == {"trace": [{"type": "call", "subtraces": 0}]}
    assert state_diff == {"stateDiff": [{"type": "call", "subtraces": 0}]}
    assert other == [{"type": "call", "subtraces": 0}]

    method, (args, block, config) = tracer.calls[0]
    assert (method, args, block) == ("trace_call", CALL, "latest")
    assert config.tracer == "callTracerParity"


def test_trace_call_many_is_not_decorated(api, tracer):
    tracer.call_many_result = [[{"type": "call"}], [{"type": "call"}]]

    result = asyncio.run(api.call_many([CALL, CALL], "pending", TraceConfig(nested_trace_output=True)))

    assert result == [[{"type": "call"}], [{"type": "call"}]]
    method, (args, block, config) = tracer.calls[0]
    assert method == "trace_call_many"
    assert list(args) == [CALL, CALL]
    assert block == "pending"
    assert config == TraceConfig(tracer="callTracerParity", nested_trace_output=True)


def test_default_tracer_from_settings(chain, rewards):
    tracer = FakeTracer(block_traces={50: [TxTraceResult(result=b"[]")]})
    api = ParityTraceAPI(chain, tracer, rewards, settings=TraceAPISettings(default_tracer="callTracer"))

    asyncio.run(api.block(50))
    asyncio.run(api.transaction("0x" + "00" * 32))

    assert [args[1].tracer for _, args in tracer.calls] == ["callTracer", "callTracer"]
