from app.domain.entities.listing import LenderProfile, Listing


class ListingRepo:
    async def get(self, listing_id: str) -> Listing | None:
        raise NotImplementedError


class LenderRepo:
    async def get_by_user(self, user_id: str) -> LenderProfile | None:
        raise NotImplementedError

    async def find_by_stripe_account(self, stripe_account_id: str) -> LenderProfile | None:
        raise NotImplementedError

    async def save(self, profile: LenderProfile) -> None:
        raise NotImplementedError
