"""
Seed demo accounts and a transfer, then print a bearer token and the
feed URL for trying the live transfer stream locally.
"""
import asyncio
from decimal import Decimal

from sqlalchemy import select

from transfer_feed.core.config import get_settings
from transfer_feed.core.security import create_access_token
from transfer_feed.db.models import FinancialAccount, Transfer
from transfer_feed.infrastructure.database.session import dispose_engine, get_session, init_db

DEMO_ACCOUNTS = {
    "account:checking": "Checking",
    "account:savings": "Savings",
}


async def seed_demo_data():
    await init_db()

    async for db in get_session():
        existing = await db.execute(select(FinancialAccount.id).where(FinancialAccount.id.in_(DEMO_ACCOUNTS)))
        known = set(existing.scalars().all())
        for account_id, name in DEMO_ACCOUNTS.items():
            if account_id not in known:
                db.add(FinancialAccount(id=account_id, name=name, owner_id="demo"))
        await db.flush()

        if not known:
            db.add(
                Transfer(
                    from_account_id="account:checking",
                    to_account_id="account:savings",
                    amount=Decimal("125.00"),
                    type="transfer",
                    status="draft",
                    label="Monthly savings",
                    created_by="demo",
                )
            )

    await dispose_engine()

    settings = get_settings()
    token = create_access_token("demo", "demo", "admin")
    account_ids = ",".join(DEMO_ACCOUNTS)
    print("=" * 50)
    print(f"token: {token}")
    print(
        f"feed:  http://{settings.host}:{settings.port}{settings.api_prefix}"
        f"/transfers/live?accountIds={account_ids}&token={token}"
    )
    print("=" * 50)


if __name__ == "__main__":
    asyncio.run(seed_demo_data())
