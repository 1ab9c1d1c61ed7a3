import logging

from app.api.schemas.stripe import AccountStatusResponse
from app.application.interfaces.audit_log_repo import AuditLogRepo
from app.application.interfaces.clock import Clock
from app.application.interfaces.listing_repo import LenderRepo
from app.application.interfaces.stripe_gateway import StripeGateway
from app.application.interfaces.transaction_manager import TransactionManager
from app.domain.entities.webhook_event import AuditLogEntry
from app.domain.errors import LenderAccountNotConfiguredError, LenderProfileNotFoundError


class SyncLenderAccountUseCase:
    """
    Pulls the lender's connected account from Stripe and stores its flags.

    Recovers lenders whose ``account.updated`` webhook never arrived; checkout
    reads the same flags.
    """

    def __init__(
        self,
        lender_repo: LenderRepo,
        audit_log_repo: AuditLogRepo,
        stripe_gateway: StripeGateway,
        transaction_manager: TransactionManager,
        clock: Clock,
    ) -> None:
        self._lender_repo = lender_repo
        self._audit_log_repo = audit_log_repo
        self._stripe_gateway = stripe_gateway
        self._transaction_manager = transaction_manager
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    async def execute(self, user_id: str) -> AccountStatusResponse:
        async with self._transaction_manager.start():
            profile = await self._lender_repo.get_by_user(user_id)
        if not profile:
            raise LenderProfileNotFoundError(user_id)
        if not profile.stripe_account_id:
            raise LenderAccountNotConfiguredError(user_id)

        status = await self._stripe_gateway.retrieve_account(profile.stripe_account_id)

        async with self._transaction_manager.start():
            current = await self._lender_repo.get_by_user(user_id) or profile
            if current.sync_account(
                charges_enabled=status.charges_enabled,
                payouts_enabled=status.payouts_enabled,
                details_submitted=status.details_submitted,
            ):
                await self._lender_repo.save(current)
                await self._audit_log_repo.add(
                    AuditLogEntry(
                        entity_type="lender_profile",
                        entity_id=current.id,
                        action="stripe_account_synced",
                        changes={
                            "charges_enabled": current.charges_enabled,
                            "payouts_enabled": current.payouts_enabled,
                            "verification_status": current.verification_status.value,
                        },
                        user_id=user_id,
                        created_at=self._clock.now(),
                    )
                )
                self._logger.info(
                    "Lender account flags updated from Stripe",
                    extra={"user_id": user_id, "stripe_account_id": status.account_id},
                )

        return AccountStatusResponse(
            charges_enabled=status.charges_enabled,
            payouts_enabled=status.payouts_enabled,
            details_submitted=status.details_submitted,
            requires_info=status.requires_info,
            requirements=status.requirements,
        )
