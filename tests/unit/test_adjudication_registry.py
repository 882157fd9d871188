"""
Unit tests for the adjudication registry.
"""

import pytest

from bondescrow.chain import ChainEnvironment
from bondescrow.collaborators import PaymentToken
from bondescrow.config import GovernanceConfig
from bondescrow.errors import (
    AlreadyExecutedError,
    AlreadyVotedError,
    AuthorizationError,
    ProposalNotFoundError,
    QuorumNotReachedError,
    ValidationError,
    VotingClosedError,
    VotingStillOpenError,
)
from bondescrow.governance import AdjudicationProposal, AdjudicationRegistry, ProposalStatus

WEEK = 7 * 86_400


class TestAdjudicationProposal:
    """Test AdjudicationProposal."""

    def test_empty_evidence_rejected(self):
        with pytest.raises(ValidationError):
            AdjudicationProposal(
                proposal_id=0,
                posted_bond_id=0,
                proposer="g1",
                evidence="",
                created_at=0,
                deadline=10,
            )

    def test_status_transitions(self):
        proposal = AdjudicationProposal(
            proposal_id=0,
            posted_bond_id=0,
            proposer="g1",
            evidence="watermark",
            created_at=0,
            deadline=10,
        )

        assert proposal.status(10) == ProposalStatus.OPEN
        assert proposal.status(11) == ProposalStatus.CLOSED

        proposal.executed = True
        proposal.approved = False
        assert proposal.status(11) == ProposalStatus.REJECTED


class TestAdjudicationRegistry:
    """Test AdjudicationRegistry."""

    @pytest.fixture
    def env(self):
        return ChainEnvironment()

    @pytest.fixture
    def token(self, env):
        return env.deploy(PaymentToken("token", "minter"))

    @pytest.fixture
    def registry(self, env, token):
        registry = env.deploy(AdjudicationRegistry("registry", "owner", token))
        env.transact("owner", registry.set_escrow_contract, "escrow")
        for governor in ("g1", "g2", "g3"):
            env.transact("owner", registry.grant_adjudicator, governor)
        return registry

    @pytest.fixture
    def proposal_id(self, env, registry):
        return env.transact("g1", registry.create_proposal, 0, "Leak evidence: watermark detected")

    def test_create_proposal(self, env, registry, proposal_id):
        proposal = registry.get_proposal(proposal_id)

        assert proposal_id == 0
        assert proposal.posted_bond_id == 0
        assert proposal.proposer == "g1"
        assert proposal.created_at == env.now
        assert proposal.deadline == env.now + WEEK
        assert not proposal.executed
        assert proposal.approved is None
        assert registry.proposal_count() == 1
        assert env.events("ProposalCreated")[0].args == {
            "proposal_id": 0,
            "posted_bond_id": 0,
            "proposer": "g1",
        }

    def test_create_requires_adjudicator(self, env, registry):
        with pytest.raises(AuthorizationError):
            env.transact("outsider", registry.create_proposal, 0, "evidence")

    def test_create_requires_evidence(self, env, registry):
        with pytest.raises(ValidationError):
            env.transact("g1", registry.create_proposal, 0, "")
        assert registry.proposal_count() == 0

    def test_create_rejects_negative_posted_bond_id(self, env, registry):
        with pytest.raises(ValidationError):
            env.transact("g1", registry.create_proposal, -1, "evidence")

    def test_sequential_ids(self, env, registry, proposal_id):
        assert env.transact("g2", registry.create_proposal, 4, "other") == 1

    def test_vote(self, env, registry, proposal_id):
        env.transact("g1", registry.vote, proposal_id, True)
        env.transact("g2", registry.vote, proposal_id, False)

        proposal = registry.get_proposal(proposal_id)
        assert proposal.votes_for == 1
        assert proposal.votes_against == 1
        assert registry.has_voted(proposal_id, "g1")
        assert not registry.has_voted(proposal_id, "g3")
        assert registry.get_ballot(proposal_id, "g2").support is False
        assert registry.get_ballot(proposal_id, "g3") is None

    def test_vote_once(self, env, registry, proposal_id):
        env.transact("g1", registry.vote, proposal_id, True)

        with pytest.raises(AlreadyVotedError):
            env.transact("g1", registry.vote, proposal_id, False)
        assert registry.get_proposal(proposal_id).votes_against == 0

    def test_vote_requires_adjudicator(self, env, registry, proposal_id):
        with pytest.raises(AuthorizationError):
            env.transact("outsider", registry.vote, proposal_id, True)

    def test_vote_allowed_at_deadline(self, env, registry, proposal_id):
        env.advance_time(WEEK)
        env.transact("g1", registry.vote, proposal_id, True)

    def test_vote_after_deadline(self, env, registry, proposal_id):
        env.advance_time(WEEK + 1)

        with pytest.raises(VotingClosedError):
            env.transact("g1", registry.vote, proposal_id, True)

    def test_vote_unknown_proposal(self, env, registry):
        with pytest.raises(ProposalNotFoundError):
            env.transact("g1", registry.vote, 9, True)

    def test_revoked_adjudicator_cannot_vote(self, env, registry, proposal_id):
        env.transact("owner", registry.revoke_adjudicator, "g3")

        with pytest.raises(AuthorizationError):
            env.transact("g3", registry.vote, proposal_id, True)
        assert registry.adjudicators() == ["g1", "g2"]

    def test_execute_approved(self, env, registry, proposal_id):
        env.transact("g1", registry.vote, proposal_id, True)
        env.transact("g2", registry.vote, proposal_id, True)
        env.advance_time(WEEK + 1)

        assert env.transact("escrow", registry.execute_proposal, proposal_id) is True

        proposal = registry.get_proposal(proposal_id)
        assert proposal.executed
        assert proposal.approved is True
        assert registry.proposal_status(proposal_id, env.now) == ProposalStatus.APPROVED
        assert env.events("ProposalExecuted")[0].args == {
            "proposal_id": proposal_id,
            "approved": True,
        }

    def test_tie_rejects(self, env, registry, proposal_id):
        env.transact("g1", registry.vote, proposal_id, True)
        env.transact("g2", registry.vote, proposal_id, False)
        env.advance_time(WEEK + 1)

        assert env.transact("escrow", registry.execute_proposal, proposal_id) is False
        assert registry.proposal_status(proposal_id, env.now) == ProposalStatus.REJECTED

    def test_execute_only_by_escrow(self, env, registry, proposal_id):
        env.transact("g1", registry.vote, proposal_id, True)
        env.transact("g2", registry.vote, proposal_id, True)
        env.advance_time(WEEK + 1)

        with pytest.raises(AuthorizationError):
            env.transact("g1", registry.execute_proposal, proposal_id)

    def test_execute_before_deadline(self, env, registry, proposal_id):
        env.transact("g1", registry.vote, proposal_id, True)
        env.transact("g2", registry.vote, proposal_id, True)
        env.advance_time(WEEK)

        with pytest.raises(VotingStillOpenError):
            env.transact("escrow", registry.execute_proposal, proposal_id)
        assert registry.proposal_status(proposal_id, env.now) == ProposalStatus.OPEN

    def test_execute_without_quorum(self, env, registry, proposal_id):
        env.transact("g1", registry.vote, proposal_id, True)
        env.advance_time(WEEK + 1)

        with pytest.raises(QuorumNotReachedError) as exc_info:
            env.transact("escrow", registry.execute_proposal, proposal_id)
        assert exc_info.value.ballots == 1
        assert exc_info.value.required == 2
        assert registry.proposal_status(proposal_id, env.now) == ProposalStatus.CLOSED

    def test_execute_twice(self, env, registry, proposal_id):
        env.transact("g1", registry.vote, proposal_id, True)
        env.transact("g2", registry.vote, proposal_id, True)
        env.advance_time(WEEK + 1)
        env.transact("escrow", registry.execute_proposal, proposal_id)

        with pytest.raises(AlreadyExecutedError):
            env.transact("escrow", registry.execute_proposal, proposal_id)
        assert registry.get_proposal(proposal_id).approved is True

    def test_admin_settings(self, env, registry):
        env.transact("owner", registry.set_voting_period, 3_600)
        env.transact("owner", registry.set_required_votes, 3)

        assert registry.voting_period == 3_600
        assert registry.required_votes == 3
        with pytest.raises(ValidationError):
            env.transact("owner", registry.set_voting_period, 0)
        with pytest.raises(AuthorizationError):
            env.transact("g1", registry.set_required_votes, 1)

    def test_voting_period_applies_to_new_proposals(self, env, registry, proposal_id):
        env.transact("owner", registry.set_voting_period, 3_600)
        new_id = env.transact("g1", registry.create_proposal, 1, "evidence")

        assert registry.get_proposal(proposal_id).deadline == env.now + WEEK
        assert registry.get_proposal(new_id).deadline == env.now + 3_600

    def test_config_values(self, env, token):
        registry = AdjudicationRegistry(
            "other", "owner", token, GovernanceConfig(voting_period=60, required_votes=1)
        )
        assert registry.voting_period == 60
        assert registry.required_votes == 1

    def test_treasury(self, env, token, registry):
        env.transact("minter", token.mint, registry.address, 500)
        assert registry.treasury_balance() == 500

        with pytest.raises(AuthorizationError):
            env.transact("g1", registry.withdraw_treasury, "g1", 100)

        env.transact("owner", registry.withdraw_treasury, "dao", 200)
        assert registry.treasury_balance() == 300
        assert token.balance_of("dao") == 200
