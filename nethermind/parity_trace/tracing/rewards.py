import logging
from typing import Any, Sequence

from eth_typing import ChecksumAddress

from nethermind.parity_trace.types.chain import (
    Block,
    BlockHeader,
    ChainReader,
    ConsensusRewards,
)
from nethermind.parity_trace.types.trace import (
    RewardTrace,
    RewardType,
    TraceRewardAction,
)

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("parity_trace").getChild("rewards")


class FixedRewards:
    """
    Reward source paying configured amounts, independent of forks or block height.  The defaults fit chains
    without issuance rewards, where the miner reward is zero and uncles are never rewarded.
    """

    def __init__(self, miner_reward: int = 0, uncle_rewards: Sequence[int] = ()):
        if miner_reward < 0 or any(reward < 0 for reward in uncle_rewards):
            raise ValueError("Rewards cannot be negative")
        self.miner_reward = miner_reward
        self.uncle_rewards = tuple(uncle_rewards)

    def get_rewards(
        self,
        chain_config: Any,  # pylint: disable=unused-argument
        header: BlockHeader,  # pylint: disable=unused-argument
        uncles: Sequence[BlockHeader],
    ) -> tuple[int, Sequence[int]]:
        return self.miner_reward, self.uncle_rewards[: len(uncles)]


class RewardSynthesizer:
    """Builds the block and uncle reward traces the execution tracer does not produce"""

    def __init__(self, chain: ChainReader, consensus: ConsensusRewards):
        self.chain = chain
        self.consensus = consensus

    def _get_rewards(self, block: Block) -> tuple[int, Sequence[int]]:
        return self.consensus.get_rewards(self.chain.chain_config, block.header, block.uncles)

    def block_reward(self, block: Block) -> RewardTrace:
        """Returns the reward trace crediting the block's coinbase"""
        miner_reward, _ = self._get_rewards(block)
        return _reward_trace(block, block.coinbase, miner_reward, RewardType.block)

    def uncle_rewards(self, block: Block) -> list[RewardTrace]:
        """Returns one reward trace per rewarded uncle, in the order the uncles appear in the block"""
        _, uncle_rewards = self._get_rewards(block)
        return self._uncle_traces(block, uncle_rewards)

    def rewards(self, block: Block) -> tuple[RewardTrace, list[RewardTrace]]:
        """Returns the block reward trace and uncle reward traces from a single reward lookup"""
        miner_reward, uncle_rewards = self._get_rewards(block)
        return (
            _reward_trace(block, block.coinbase, miner_reward, RewardType.block),
            self._uncle_traces(block, uncle_rewards),
        )

    @staticmethod
    def _uncle_traces(block: Block, uncle_rewards: Sequence[int]) -> list[RewardTrace]:
        traces = []
        for index, uncle in enumerate(block.uncles):
            if index >= len(uncle_rewards):
                # Uncles without a reward amount are skipped
                logger.debug(f"No reward for uncle #{index} of block {block.number}")
                continue
            traces.append(_reward_trace(block, uncle.coinbase, uncle_rewards[index], RewardType.uncle))
        return traces


def _reward_trace(block: Block, author: ChecksumAddress, value: int, reward_type: RewardType) -> RewardTrace:
    return RewardTrace(
        action=TraceRewardAction(value=value, author=author, reward_type=reward_type),
        block_hash=block.hash,
        block_number=block.number,
    )
