from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.interfaces.listing_repo import LenderRepo, ListingRepo
from app.domain.entities.listing import (
    LenderProfile,
    Listing,
    ListingAddOn,
    ListingDeposit,
    ListingVariant,
    PricingType,
    VerificationStatus,
)
from app.infrastructure.db.tables import (
    lender_profiles,
    listing_add_ons,
    listing_deposits,
    listing_variants,
    listings,
)


class ListingRepoSQL(ListingRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, listing_id: str) -> Listing | None:
        result = await self._session.execute(
            select(listings).where(listings.c.id == listing_id).limit(1)
        )
        row = result.mappings().first()
        if not row:
            return None

        variants = await self._session.execute(
            select(listing_variants).where(listing_variants.c.listing_id == listing_id)
        )
        add_ons = await self._session.execute(
            select(listing_add_ons).where(listing_add_ons.c.listing_id == listing_id)
        )
        deposits = await self._session.execute(
            select(listing_deposits)
            .where(listing_deposits.c.listing_id == listing_id)
            .order_by(listing_deposits.c.id)
        )
        return Listing(
            id=row["id"],
            lender_id=row["lender_id"],
            title=row["title"],
            base_price=row["base_price"],
            pricing_type=PricingType(row["pricing_type"]),
            min_rental_duration=row["min_rental_duration"],
            max_rental_duration=row["max_rental_duration"],
            quantity_available=row["quantity_available"],
            cover_image_url=row["cover_image_url"],
            variants=[
                ListingVariant(id=v["id"], name=v["name"], price_adjustment=v["price_adjustment"])
                for v in variants.mappings().all()
            ],
            add_ons=[
                ListingAddOn(
                    id=a["id"], name=a["name"], price=a["price"], is_required=a["is_required"]
                )
                for a in add_ons.mappings().all()
            ],
            deposits=[
                ListingDeposit(id=d["id"], amount=d["amount"]) for d in deposits.mappings().all()
            ],
        )


class LenderRepoSQL(LenderRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_user(self, user_id: str) -> LenderProfile | None:
        result = await self._session.execute(
            select(lender_profiles).where(lender_profiles.c.user_id == user_id).limit(1)
        )
        row = result.mappings().first()
        return self._to_entity(row) if row else None

    async def find_by_stripe_account(self, stripe_account_id: str) -> LenderProfile | None:
        result = await self._session.execute(
            select(lender_profiles)
            .where(lender_profiles.c.stripe_account_id == stripe_account_id)
            .limit(1)
        )
        row = result.mappings().first()
        return self._to_entity(row) if row else None

    async def save(self, profile: LenderProfile) -> None:
        await self._session.execute(
            update(lender_profiles)
            .where(lender_profiles.c.id == profile.id)
            .values(
                stripe_account_id=profile.stripe_account_id,
                charges_enabled=profile.charges_enabled,
                payouts_enabled=profile.payouts_enabled,
                onboarding_completed=profile.onboarding_completed,
                verification_status=profile.verification_status.value,
            )
        )

    @staticmethod
    def _to_entity(row) -> LenderProfile:
        return LenderProfile(
            id=row["id"],
            user_id=row["user_id"],
            stripe_account_id=row["stripe_account_id"],
            charges_enabled=row["charges_enabled"],
            payouts_enabled=row["payouts_enabled"],
            onboarding_completed=row["onboarding_completed"],
            verification_status=VerificationStatus(row["verification_status"]),
        )
