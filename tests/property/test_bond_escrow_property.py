"""
Property-based tests for the bond escrow using Hypothesis.

These tests check the accounting and lifecycle invariants under randomly
generated amounts, time gaps and operation orders.
"""

import logging

logger = logging.getLogger(__name__)
import pytest
from hypothesis import given, strategies as st

from bondescrow.chain import Account, ChainEnvironment
from bondescrow.collaborators import PaymentToken
from bondescrow.config import SECONDS_PER_YEAR, SystemConfig
from bondescrow.errors import BondEscrowError, BondUnavailableError
from bondescrow.escrow import BondEscrowSystem
from bondescrow.escrow.fees import split_settlement
from bondescrow.staking import RewardLedger

TOKEN = 10**18
DAY = 86_400
WEEK = 7 * DAY


def interval_reward(principal, elapsed, rate_bps):
    return principal * rate_bps * elapsed // (10_000 * SECONDS_PER_YEAR)


class TestRewardLedgerProperties:
    """Reward accrual properties."""

    @given(
        st.lists(
            st.tuples(
                st.integers(min_value=0, max_value=30 * DAY),
                st.integers(min_value=1, max_value=1_000 * TOKEN),
            ),
            min_size=1,
            max_size=6,
        ),
        st.integers(min_value=0, max_value=365 * DAY),
        st.integers(min_value=0, max_value=10_000),
    )
    def test_unstake_returns_sum_of_stakes_and_interval_rewards(self, top_ups, final_gap, rate_bps):
        env = ChainEnvironment()
        token = env.deploy(PaymentToken("token", "minter"))
        ledger = env.deploy(RewardLedger("ledger", "owner", token))
        env.transact("owner", ledger.set_trusted_caller, "escrow")
        env.transact("owner", ledger.set_reward_rate, rate_bps)
        env.transact("minter", token.mint, "ledger", 10**40)

        principal = 0
        expected_reward = 0
        for gap, amount in top_ups:
            if principal:
                expected_reward += interval_reward(principal, gap, rate_bps)
            env.advance_time(gap)
            env.transact("escrow", ledger.stake, 7, amount)
            principal += amount

        expected_reward += interval_reward(principal, final_gap, rate_bps)
        env.advance_time(final_gap)
        returned_principal, reward = env.transact("escrow", ledger.unstake, 7)

        assert returned_principal == principal
        assert reward == expected_reward
        assert token.balance_of("escrow") == principal + reward
        assert not ledger.has_stake(7)

    @given(
        st.integers(min_value=1, max_value=10**30),
        st.integers(min_value=0, max_value=10**25),
        st.integers(min_value=0, max_value=1_000),
    )
    def test_settlement_split_conserves_funds(self, principal, reward, fee_bps):
        breakdown = split_settlement(principal, reward, fee_bps)

        assert breakdown.holder_payout + breakdown.governance_fee == principal + reward
        assert breakdown.holder_payout >= principal
        assert 0 <= breakdown.governance_fee <= reward // 10


class TestEscrowProperties:
    """Lifecycle properties of the deployed system."""

    @given(
        st.integers(min_value=1, max_value=5),
        st.integers(min_value=1, max_value=8),
    )
    def test_remaining_quantity_never_increases(self, quantity, attempts):
        system = BondEscrowSystem.deploy(config=SystemConfig(initial_reward_reserve=TOKEN))
        env, escrow = system.env, system.escrow
        issuer = Account.from_seed("issuer").address
        poster = Account.from_seed("poster").address
        system.fund(poster, attempts * TOKEN)
        bond_id = env.transact(issuer, escrow.issue_bond, "video", TOKEN, DAY, quantity)

        previous = quantity
        for _ in range(attempts):
            try:
                env.transact(poster, escrow.post_bond, bond_id)
            except BondUnavailableError:
                assert previous == 0
            remaining = escrow.get_bond(bond_id).remaining_quantity
            assert 0 <= remaining <= previous <= quantity
            previous = remaining

        posted = min(quantity, attempts)
        assert escrow.get_bond(bond_id).remaining_quantity == quantity - posted
        assert escrow.posted_bond_count() == posted
        assert escrow.get_bond(bond_id).is_active == (posted < quantity)
        assert all(system.ledger.has_stake(i) for i in range(posted))

    @given(st.lists(st.booleans(), min_size=1, max_size=6))
    def test_ballot_count_matches_distinct_voters(self, supports):
        system = BondEscrowSystem.deploy()
        env, registry = system.env, system.registry
        voters = [f"voter-{i}" for i in range(len(supports))]
        for voter in voters:
            system.add_adjudicator(voter)
        proposal_id = env.transact(voters[0], registry.create_proposal, 0, "evidence")

        for voter, support in zip(voters, supports):
            env.transact(voter, registry.vote, proposal_id, support)
            with pytest.raises(BondEscrowError):
                env.transact(voter, registry.vote, proposal_id, not support)

        proposal = registry.get_proposal(proposal_id)
        assert proposal.votes_for + proposal.votes_against == len(supports)
        assert proposal.votes_for == sum(supports)
        assert len(proposal.ballots) == len(supports)

    @given(
        st.lists(
            st.tuples(
                st.sampled_from(["claim", "adjudicate"]),
                st.integers(min_value=0, max_value=3 * DAY),
            ),
            min_size=1,
            max_size=8,
        ),
        st.booleans(),
    )
    def test_posted_bond_settles_at_most_once(self, operations, approve):
        system = BondEscrowSystem.deploy(config=SystemConfig(initial_reward_reserve=100 * TOKEN))
        env, escrow, registry = system.env, system.escrow, system.registry
        issuer = Account.from_seed("issuer").address
        poster = Account.from_seed("poster").address
        system.add_adjudicator("g1")
        system.add_adjudicator("g2")
        system.fund(poster, TOKEN)

        bond_id = env.transact(issuer, escrow.issue_bond, "video", TOKEN, 2 * DAY, 1)
        posted_bond_id = env.transact(poster, escrow.post_bond, bond_id)
        proposal_id = env.transact("g1", registry.create_proposal, posted_bond_id, "leak")
        env.transact("g1", registry.vote, proposal_id, approve)
        env.transact("g2", registry.vote, proposal_id, approve)

        transitions = 0
        was_active = True
        for operation, gap in operations:
            env.advance_time(gap)
            method = escrow.claim_expired_bond if operation == "claim" else escrow.adjudicate_leak
            target = posted_bond_id if operation == "claim" else proposal_id
            try:
                env.transact(poster, method, target)
            except BondEscrowError:
                pass
            is_active = escrow.get_posted_bond(posted_bond_id).is_active
            assert not (is_active and not was_active)
            if was_active and not is_active:
                transitions += 1
            was_active = is_active

        assert transitions <= 1
        settlements = env.events("BondExpired") + env.events("LeakAdjudicated")
        assert len(settlements) == transitions
        assert system.ledger.has_stake(posted_bond_id) == was_active
