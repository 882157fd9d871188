"""
Unit tests for the reward ledger.
"""

import pytest

from bondescrow.chain import ChainEnvironment
from bondescrow.collaborators import PaymentToken
from bondescrow.config import SECONDS_PER_YEAR, StakingConfig
from bondescrow.errors import (
    AuthorizationError,
    NoStakeFoundError,
    TransferFailedError,
    ValidationError,
)
from bondescrow.staking import RewardLedger, StakeInfo

PRINCIPAL = 100 * 10**18


def expected_reward(principal, elapsed, rate_bps=1000):
    return principal * rate_bps * elapsed // (10_000 * SECONDS_PER_YEAR)


class TestStakeInfo:
    """Test StakeInfo accrual."""

    def test_pending_reward_is_linear(self):
        info = StakeInfo(principal=PRINCIPAL, start_time=0, last_reward_time=0)

        assert info.pending_reward(SECONDS_PER_YEAR, 1000, SECONDS_PER_YEAR) == PRINCIPAL // 10
        assert info.pending_reward(0, 1000, SECONDS_PER_YEAR) == 0

    def test_pending_reward_rounds_down(self):
        info = StakeInfo(principal=1, start_time=0, last_reward_time=0)
        assert info.pending_reward(86_400, 1000, SECONDS_PER_YEAR) == 0

    def test_clock_before_last_reward_time_accrues_nothing(self):
        info = StakeInfo(principal=PRINCIPAL, start_time=100, last_reward_time=100)
        assert info.pending_reward(50, 1000, SECONDS_PER_YEAR) == 0


class TestRewardLedger:
    """Test RewardLedger."""

    @pytest.fixture
    def env(self):
        return ChainEnvironment()

    @pytest.fixture
    def token(self, env):
        return env.deploy(PaymentToken("token", "minter"))

    @pytest.fixture
    def ledger(self, env, token):
        ledger = env.deploy(RewardLedger("ledger", "owner", token))
        env.transact("owner", ledger.set_trusted_caller, "escrow")
        # Custody for the principal plus a reward reserve
        env.transact("minter", token.mint, "ledger", 2 * PRINCIPAL)
        return ledger

    def test_stake_creates_record(self, env, ledger):
        env.transact("escrow", ledger.stake, 0, PRINCIPAL)

        info = ledger.get_stake(0)
        assert info.principal == PRINCIPAL
        assert info.start_time == env.now
        assert info.last_reward_time == env.now
        assert info.accumulated_rewards == 0
        assert ledger.has_stake(0)
        assert ledger.total_staked() == PRINCIPAL
        assert env.events("Staked")[0].args == {"key": 0, "amount": PRINCIPAL}

    def test_stake_requires_trusted_caller(self, env, ledger):
        with pytest.raises(AuthorizationError):
            env.transact("mallory", ledger.stake, 0, PRINCIPAL)
        assert not ledger.has_stake(0)

    def test_stake_requires_positive_amount(self, env, ledger):
        with pytest.raises(ValidationError):
            env.transact("escrow", ledger.stake, 0, 0)

    def test_calculate_reward(self, env, ledger):
        env.transact("escrow", ledger.stake, 0, PRINCIPAL)

        later = env.now + 30 * 86_400
        assert ledger.calculate_reward(0, later) == expected_reward(PRINCIPAL, 30 * 86_400)
        assert ledger.calculate_reward(99, later) == 0

    def test_top_up_folds_pending_reward(self, env, ledger):
        env.transact("escrow", ledger.stake, 0, PRINCIPAL)
        env.advance_time(1_000)
        env.transact("escrow", ledger.stake, 0, PRINCIPAL)

        info = ledger.get_stake(0)
        assert info.principal == 2 * PRINCIPAL
        assert info.accumulated_rewards == expected_reward(PRINCIPAL, 1_000)
        assert info.last_reward_time == env.now

    def test_unstake_pays_trusted_caller(self, env, token, ledger):
        env.transact("escrow", ledger.stake, 0, PRINCIPAL)
        env.advance_time(86_401)

        principal, reward = env.transact("escrow", ledger.unstake, 0)

        assert principal == PRINCIPAL
        assert reward == expected_reward(PRINCIPAL, 86_401)
        assert token.balance_of("escrow") == PRINCIPAL + reward
        assert not ledger.has_stake(0)
        assert ledger.total_staked() == 0
        assert env.events("Unstaked")[0].args == {
            "key": 0,
            "principal": PRINCIPAL,
            "reward": reward,
        }

    def test_unstake_missing_key(self, env, ledger):
        with pytest.raises(NoStakeFoundError):
            env.transact("escrow", ledger.unstake, 3)

    def test_unstake_twice_fails(self, env, ledger):
        env.transact("escrow", ledger.stake, 0, PRINCIPAL)
        env.transact("escrow", ledger.unstake, 0)

        with pytest.raises(NoStakeFoundError):
            env.transact("escrow", ledger.unstake, 0)

    def test_unstake_rolls_back_when_payout_refused(self, env, ledger):
        env.transact("escrow", ledger.stake, 0, PRINCIPAL)
        ledger.token = _RefusingToken()

        with pytest.raises(TransferFailedError):
            env.transact("escrow", ledger.unstake, 0)

        assert ledger.has_stake(0)
        assert ledger.total_staked() == PRINCIPAL

    def test_reward_rate_from_config(self, env, token):
        ledger = RewardLedger("other", "owner", token, StakingConfig(reward_rate_bps=2500))
        assert ledger.reward_rate_bps == 2500

    def test_set_reward_rate(self, env, ledger):
        with pytest.raises(AuthorizationError):
            env.transact("escrow", ledger.set_reward_rate, 2000)
        with pytest.raises(ValidationError):
            env.transact("owner", ledger.set_reward_rate, 10_001)

        env.transact("owner", ledger.set_reward_rate, 2000)
        assert ledger.reward_rate_bps == 2000

    def test_rate_change_keeps_earned_reward(self, env, ledger):
        env.transact("escrow", ledger.stake, 0, PRINCIPAL)
        env.advance_time(SECONDS_PER_YEAR)
        earned = ledger.calculate_reward(0, env.now)
        assert earned == PRINCIPAL // 10

        env.transact("owner", ledger.set_reward_rate, 0)
        info = ledger.get_stake(0)
        assert info.accumulated_rewards == earned
        assert info.last_reward_time == env.now

        env.advance_time(SECONDS_PER_YEAR)
        principal, reward = env.transact("escrow", ledger.unstake, 0)

        assert principal == PRINCIPAL
        assert reward == earned

    def test_rate_change_applies_only_from_then_on(self, env, ledger):
        env.transact("escrow", ledger.stake, 0, PRINCIPAL)
        env.advance_time(1_000)
        env.transact("owner", ledger.set_reward_rate, 2000)
        env.advance_time(3_000)

        _, reward = env.transact("escrow", ledger.unstake, 0)

        assert reward == expected_reward(PRINCIPAL, 1_000) + expected_reward(
            PRINCIPAL, 3_000, rate_bps=2000
        )


class _RefusingToken:
    """Payment ledger that reports every transfer as failed."""

    address = "refusing-token"

    def transfer(self, ctx, recipient, amount):
        return False

    def transfer_from(self, ctx, owner, recipient, amount):
        return False

    def balance_of(self, identity):
        return 0
