from copy import deepcopy

from app.application.interfaces.listing_repo import LenderRepo, ListingRepo
from app.domain.entities.listing import LenderProfile, Listing


class InMemoryListingRepo(ListingRepo):
    def __init__(self) -> None:
        self.listings: dict[str, Listing] = {}

    def add(self, listing: Listing) -> None:
        self.listings[listing.id] = listing

    async def get(self, listing_id: str) -> Listing | None:
        return self.listings.get(listing_id)


class InMemoryLenderRepo(LenderRepo):
    def __init__(self) -> None:
        self.profiles: dict[str, LenderProfile] = {}

    def add(self, profile: LenderProfile) -> None:
        self.profiles[profile.user_id] = profile

    async def get_by_user(self, user_id: str) -> LenderProfile | None:
        profile = self.profiles.get(user_id)
        return deepcopy(profile) if profile else None

    async def find_by_stripe_account(self, stripe_account_id: str) -> LenderProfile | None:
        for profile in self.profiles.values():
            if profile.stripe_account_id == stripe_account_id:
                return deepcopy(profile)
        return None

    async def save(self, profile: LenderProfile) -> None:
        self.profiles[profile.user_id] = deepcopy(profile)
