"""
Bond escrow demonstration.

This script walks through the life of bonded assets: deploying the
contracts, issuing bonds, posting them with and without an affiliate,
claiming at expiry and redirecting funds through leak adjudication.
"""

import logging

logger = logging.getLogger(__name__)
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from bondescrow.chain import Account
from bondescrow.config import SystemConfig
from bondescrow.errors import BondEscrowError, NotYetExpiredError
from bondescrow.escrow import BondEscrowSystem

TOKEN = 10**18
DAY = 86_400
WEEK = 7 * DAY


def print_section(title: str):
    """Print a section header."""
    logger.info(f"\n{'='*60}")
    logger.info(f"🎯 {title}")
    logger.info("=" * 60)


def fmt(amount: int) -> str:
    return f"{amount / TOKEN:,.6f} PAY"


def demo_deployment() -> BondEscrowSystem:
    """Deploy and wire the contracts with a funded reward reserve."""
    print_section("Deployment")

    system = BondEscrowSystem.deploy(config=SystemConfig(initial_reward_reserve=10_000 * TOKEN))
    logger.info(f"Payment token:        {system.token.address}")
    logger.info(f"Certificate registry: {system.certificates.address}")
    logger.info(f"Reward ledger:        {system.ledger.address}")
    logger.info(f"Adjudication registry:{system.registry.address}")
    logger.info(f"Escrow:               {system.escrow.address}")
    logger.info(f"Reward reserve:       {fmt(system.token.balance_of(system.ledger.address))}")
    return system


def demo_expiry(system: BondEscrowSystem, issuer: Account, poster: Account, affiliate: Account):
    """Post a bond through an affiliate and claim it at expiry."""
    print_section("Posting and Expiry")
    env, escrow = system.env, system.escrow

    bond_id = env.transact(issuer.address, escrow.issue_bond, "video", 100 * TOKEN, DAY, 10)
    logger.info(f"Issuer published bond {bond_id}: 10 x {fmt(100 * TOKEN)} for one day")

    posted_bond_id = env.transact(poster.address, escrow.post_bond, bond_id, affiliate.address)
    posted = escrow.get_posted_bond(posted_bond_id)
    logger.info(f"Poster locked {fmt(posted.amount)} as posted bond {posted_bond_id}")
    logger.info(f"Affiliate earned {fmt(system.token.balance_of(affiliate.address))}")

    try:
        env.transact(poster.address, escrow.claim_expired_bond, posted_bond_id)
    except NotYetExpiredError as e:
        logger.info(f"Early claim refused: {e.message}")

    env.advance_time(DAY + 1)
    preview = escrow.preview_settlement(posted_bond_id, env.now)
    logger.info(f"Preview: reward {fmt(preview.reward)}, governance fee {fmt(preview.governance_fee)}")

    payout = env.transact(poster.address, escrow.claim_expired_bond, posted_bond_id)
    logger.info(f"✅ Holder paid {fmt(payout)}")
    logger.info(f"Treasury now holds {fmt(system.registry.treasury_balance())}")


def demo_adjudication(system: BondEscrowSystem, issuer: Account, poster: Account):
    """Adjudicate a leak and pay the posted bond to its issuer."""
    print_section("Leak Adjudication")
    env, escrow, registry = system.env, system.escrow, system.registry

    governors = [Account.from_seed(f"governor-{i}") for i in range(2)]
    for governor in governors:
        system.add_adjudicator(governor.address)

    bond_id = env.transact(issuer.address, escrow.issue_bond, "audio", 50 * TOKEN, 30 * DAY, 1)
    posted_bond_id = env.transact(poster.address, escrow.post_bond, bond_id)
    logger.info(f"Bond {bond_id} exhausted: active={escrow.get_bond(bond_id).is_active}")

    proposal_id = env.transact(
        governors[0].address,
        registry.create_proposal,
        posted_bond_id,
        "Leak evidence: watermark detected",
    )
    for governor in governors:
        env.transact(governor.address, registry.vote, proposal_id, True)
    logger.info(f"Proposal {proposal_id}: {registry.proposal_status(proposal_id, env.now).value}")

    env.advance_time(WEEK + 1)
    issuer_before = system.token.balance_of(issuer.address)
    amount = env.transact(poster.address, escrow.adjudicate_leak, proposal_id)
    logger.info(f"Proposal {proposal_id}: {registry.proposal_status(proposal_id, env.now).value}")
    logger.info(
        f"✅ Issuer received {fmt(amount)} "
        f"(balance {fmt(issuer_before)} -> {fmt(system.token.balance_of(issuer.address))})"
    )
    logger.info(f"Settlement: {escrow.get_posted_bond(posted_bond_id).settlement.value}")


def main():
    """Run the demonstration."""
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    logger.info("🚀 Bond Escrow Demonstration")
    logger.info("=" * 60)

    try:
        system = demo_deployment()
        issuer = Account.from_seed("issuer")
        poster = Account.from_seed("poster")
        affiliate = Account.from_seed("affiliate")
        system.fund(poster.address, 1_000 * TOKEN)

        demo_expiry(system, issuer, poster, affiliate)
        demo_adjudication(system, issuer, poster)

        print_section("Summary")
        for key, value in system.get_summary().items():
            logger.info(f"   {key}: {value}")
        logger.info(f"   event log intact: {system.env.event_log.verify_integrity()}")
    except BondEscrowError as e:
        logger.error(f"\n❌ Demonstration failed: {e}")
        return 1

    return 0


if __name__ == "__main__":
    exit_code = main()
    sys.exit(exit_code)
