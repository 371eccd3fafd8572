"""CLI tool for admin operations.

Usage:
    python -m marketplace.cli issue-token <user_id>
    python -m marketplace.cli recompute <user_id>
    python -m marketplace.cli credibility <user_id>
"""

import sys

from marketplace.database import create_db_and_tables, engine
from marketplace.services.auth import create_access_token
from marketplace.services.factory import build_lifecycle
from marketplace.utils.logging import setup_logging


def issue_token(user_id: str):
    """Print a bearer token for a user (local testing only)."""
    print(create_access_token(subject=user_id))


def recompute(user_id: str):
    """Recompute and store one user's score from history."""
    lifecycle = build_lifecycle(engine, background_notifications=False)
    result = lifecycle.credibility.recompute(user_id)
    print(f"{user_id}: {result.score}")


def show_credibility(user_id: str):
    lifecycle = build_lifecycle(engine, background_notifications=False)
    report = lifecycle.get_credibility(user_id)
    b = report.breakdown
    print(f"User:        {report.user_id}")
    print(f"Score:       {report.score} ({report.badge})")
    print(f"Stored:      {report.stored_score} at {report.last_score_update}")
    print(
        f"Breakdown:   transactions={b.transaction_score} rating={b.rating_score} "
        f"response={b.response_score} reliability={b.reliability_score}"
    )
    s = report.stats
    print(
        f"History:     total={s.total_transactions} completed={s.completed_transactions} "
        f"cancelled={s.cancelled_transactions} disputed={s.disputed_transactions}"
    )


COMMANDS = {
    "issue-token": issue_token,
    "recompute": recompute,
    "credibility": show_credibility,
}


def main():
    if len(sys.argv) < 3 or sys.argv[1] not in COMMANDS:
        print("Usage: python -m marketplace.cli <command> <user_id>")
        print(f"Commands: {', '.join(COMMANDS)}")
        sys.exit(1)

    setup_logging()
    create_db_and_tables()
    COMMANDS[sys.argv[1]](sys.argv[2])


if __name__ == "__main__":
    main()
