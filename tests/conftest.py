import json
import random

import pytest
from eth_utils import to_checksum_address

from nethermind.parity_trace.tracing.rewards import FixedRewards, RewardSynthesizer
from nethermind.parity_trace.tracing.tracer_config import TracerConfigResolver
from nethermind.parity_trace.types.trace import TxTraceResult
from tests.utils import BLOCK_REWARD, UNCLE_REWARD, FakeChain, FakeTracer, make_block


@pytest.fixture(name="random_address")
def fixture_random_address():
    def _generate_random_address():
        return to_checksum_address(random.randbytes(20).hex())

    return _generate_random_address


@pytest.fixture(name="chain")
def fixture_chain():
    """Blocks 0 - 120.  Block 100 has a single uncle, and block 101 has three"""
    blocks = [make_block(number) for number in range(121) if number not in (100, 101)]
    blocks += [make_block(100, uncles=1), make_block(101, uncles=3)]
    return FakeChain(blocks, pending=make_block(121))


@pytest.fixture(name="tracer")
def fixture_tracer():
    return FakeTracer(
        block_traces={
            100: [
                TxTraceResult(result=json.dumps([{"id": "a"}]).encode()),
                TxTraceResult(result=json.dumps([{"id": "b"}, {"id": "c"}]).encode()),
            ],
        }
    )


@pytest.fixture(name="rewards")
def fixture_rewards():
    return FixedRewards(BLOCK_REWARD, [UNCLE_REWARD] * 3)


@pytest.fixture(name="config_resolver")
def fixture_config_resolver():
    return TracerConfigResolver()


@pytest.fixture(name="reward_synthesizer")
def fixture_reward_synthesizer(chain, rewards):
    return RewardSynthesizer(chain, rewards)
