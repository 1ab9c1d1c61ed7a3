import asyncio
import sys
from decimal import Decimal
from pathlib import Path

# Add project root to sys.path
project_root = Path(__file__).resolve().parent.parent
sys.path.append(str(project_root))

from sqlalchemy import insert  # noqa: E402

from app.api.deps import engine  # noqa: E402
from app.infrastructure.db.tables import (  # noqa: E402
    lender_profiles,
    listing_add_ons,
    listing_deposits,
    listing_variants,
    listings,
    metadata,
)


async def seed():
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
        print("Created all tables.")

        await conn.execute(
            insert(lender_profiles).values(
                id="profile-demo-lender",
                user_id="demo-lender",
                stripe_account_id="acct_demo_lender",
                charges_enabled=True,
                payouts_enabled=True,
                onboarding_completed=True,
                verification_status="verified",
            )
        )
        await conn.execute(
            insert(listings).values(
                id="listing-tent",
                lender_id="demo-lender",
                title="Party Tent 6x12",
                base_price=Decimal("100.00"),
                pricing_type="daily",
                min_rental_duration=1,
                max_rental_duration=14,
                quantity_available=3,
            )
        )
        await conn.execute(
            insert(listing_variants).values(
                id="variant-tent-large",
                listing_id="listing-tent",
                name="Large (6x18)",
                price_adjustment=Decimal("40.00"),
            )
        )
        await conn.execute(
            insert(listing_add_ons),
            [
                {
                    "id": "addon-tent-setup",
                    "listing_id": "listing-tent",
                    "name": "Setup and teardown",
                    "price": Decimal("75.00"),
                    "is_required": True,
                },
                {
                    "id": "addon-tent-lights",
                    "listing_id": "listing-tent",
                    "name": "String lights",
                    "price": Decimal("20.00"),
                    "is_required": False,
                },
            ],
        )
        await conn.execute(
            insert(listing_deposits).values(
                id="deposit-tent", listing_id="listing-tent", amount=Decimal("150.00")
            )
        )

        print("Seeded demo lender and listing.")

if __name__ == "__main__":
    asyncio.run(seed())
