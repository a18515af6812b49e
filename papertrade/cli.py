"""CLI tool for account administration.

Usage:
    python -m papertrade.cli create-account <account_id>
    python -m papertrade.cli issue-token <account_id>
"""

import sys

from sqlmodel import Session, select

from papertrade.database import engine, create_db_and_tables
from papertrade.models.trading_settings import TradingSettings
from papertrade.services.auth import create_access_token, generate_webhook_secret, webhook_url


def create_account(account_id: str):
    """Create an account's trading settings with a fresh webhook secret."""
    create_db_and_tables()

    account_id = account_id.strip()
    if not account_id:
        print("Account id cannot be empty.")
        sys.exit(1)

    with Session(engine) as session:
        existing = session.exec(
            select(TradingSettings).where(TradingSettings.account_id == account_id)
        ).first()
        if existing:
            print(f"Account '{account_id}' already exists.")
            sys.exit(1)

        account = TradingSettings(account_id=account_id, webhook_secret=generate_webhook_secret())
        session.add(account)
        session.commit()
        session.refresh(account)
        secret = account.webhook_secret

    print(f"\nAccount '{account_id}' created with default risk settings.")
    print(f"\nAPI token: {create_access_token(account_id)}")
    print(f"Webhook URL: {webhook_url(secret)}")


def issue_token(account_id: str):
    """Print a fresh API token for an existing account."""
    with Session(engine) as session:
        existing = session.exec(
            select(TradingSettings).where(TradingSettings.account_id == account_id)
        ).first()
    if not existing:
        print(f"Account '{account_id}' not found.")
        sys.exit(1)
    print(create_access_token(account_id))


def main():
    if len(sys.argv) < 3:
        print("Usage: python -m papertrade.cli <command> <account_id>")
        print("Commands: create-account, issue-token")
        sys.exit(1)

    command, account_id = sys.argv[1], sys.argv[2]
    if command == "create-account":
        create_account(account_id)
    elif command == "issue-token":
        issue_token(account_id)
    else:
        print(f"Unknown command: {command}")
        sys.exit(1)


if __name__ == "__main__":
    main()
