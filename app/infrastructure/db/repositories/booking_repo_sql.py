from typing import Any, Sequence

from sqlalchemy import insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.interfaces.booking_repo import BookingRepo
from app.domain.entities.booking import (
    Booking,
    BookingAddOn,
    BookingDeposit,
    BookingPaymentStatus,
    BookingStatus,
    DepositStatus,
)
from app.domain.errors import OptimisticLockError
from app.infrastructure.db.tables import booking_add_ons, booking_deposits, bookings

# Columns rewritten by save(); amounts and parties are fixed at creation.
_MUTABLE_COLUMNS = (
    "status",
    "payment_status",
    "confirmed_at",
    "cancelled_at",
    "completed_at",
    "cancellation_reason",
    "stripe_session_id",
    "payment_intent_id",
    "payment_error",
    "updated_at",
)


class BookingRepoSQL(BookingRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, booking_id: str) -> Booking | None:
        result = await self._session.execute(
            select(bookings).where(bookings.c.id == booking_id).limit(1)
        )
        row = result.mappings().first()
        if not row:
            return None
        return await self._hydrate(row)

    async def find_by_payment_intent(self, payment_intent_id: str) -> Booking | None:
        result = await self._session.execute(
            select(bookings).where(bookings.c.payment_intent_id == payment_intent_id).limit(1)
        )
        row = result.mappings().first()
        if not row:
            return None
        return await self._hydrate(row)

    async def list_for_user(
        self,
        user_id: str,
        role: str | None = None,
        status: str | None = None,
    ) -> Sequence[Booking]:
        stmt = select(bookings)
        if role == "renter":
            stmt = stmt.where(bookings.c.renter_id == user_id)
        elif role == "lender":
            stmt = stmt.where(bookings.c.lender_id == user_id)
        else:
            stmt = stmt.where(
                (bookings.c.renter_id == user_id) | (bookings.c.lender_id == user_id)
            )
        if status:
            stmt = stmt.where(bookings.c.status == status)
        stmt = stmt.order_by(bookings.c.created_at.desc())
        result = await self._session.execute(stmt)
        return [await self._hydrate(row) for row in result.mappings().all()]

    async def create(self, booking: Booking) -> None:
        await self._session.execute(insert(bookings).values(self._to_row(booking)))
        if booking.add_ons:
            await self._session.execute(
                insert(booking_add_ons),
                [
                    {
                        "booking_id": booking.id,
                        "add_on_id": a.add_on_id,
                        "name": a.name,
                        "quantity": a.quantity,
                        "price": a.price,
                    }
                    for a in booking.add_ons
                ],
            )
        if booking.deposits:
            await self._session.execute(
                insert(booking_deposits),
                [
                    {
                        "booking_id": booking.id,
                        "deposit_id": d.deposit_id,
                        "amount": d.amount,
                        "status": d.status.value,
                    }
                    for d in booking.deposits
                ],
            )

    async def save(self, booking: Booking) -> None:
        row = self._to_row(booking)
        values = {column: row[column] for column in _MUTABLE_COLUMNS}
        stmt = (
            update(bookings)
            .where(bookings.c.id == booking.id, bookings.c.version == booking.version)
            .values(**values, version=bookings.c.version + 1)
        )
        result = await self._session.execute(stmt)
        if result.rowcount != 1:
            raise OptimisticLockError(booking.id, booking.version)
        booking.version += 1

    async def update_deposits(self, deposits: Sequence[BookingDeposit]) -> None:
        for deposit in deposits:
            await self._session.execute(
                update(booking_deposits)
                .where(
                    booking_deposits.c.booking_id == deposit.booking_id,
                    booking_deposits.c.deposit_id == deposit.deposit_id,
                )
                .values(status=deposit.status.value)
            )

    async def _hydrate(self, row: Any) -> Booking:
        add_on_rows = await self._session.execute(
            select(booking_add_ons).where(booking_add_ons.c.booking_id == row["id"])
        )
        deposit_rows = await self._session.execute(
            select(booking_deposits).where(booking_deposits.c.booking_id == row["id"])
        )
        return Booking(
            id=row["id"],
            renter_id=row["renter_id"],
            lender_id=row["lender_id"],
            listing_id=row["listing_id"],
            variant_id=row["variant_id"],
            start_date=row["start_date"],
            end_date=row["end_date"],
            quantity=row["quantity"],
            rental_duration=row["rental_duration"],
            base_amount=row["base_amount"],
            variant_amount=row["variant_amount"],
            add_ons_amount=row["add_ons_amount"],
            subtotal=row["subtotal"],
            deposit_amount=row["deposit_amount"],
            total_price=row["total_price"],
            status=BookingStatus(row["status"]),
            payment_status=BookingPaymentStatus(row["payment_status"]),
            confirmed_at=row["confirmed_at"],
            cancelled_at=row["cancelled_at"],
            completed_at=row["completed_at"],
            cancellation_reason=row["cancellation_reason"],
            renter_email=row["renter_email"],
            stripe_session_id=row["stripe_session_id"],
            payment_intent_id=row["payment_intent_id"],
            payment_error=row["payment_error"],
            version=row["version"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
            add_ons=[
                BookingAddOn(
                    add_on_id=a["add_on_id"],
                    name=a["name"],
                    quantity=a["quantity"],
                    price=a["price"],
                    booking_id=a["booking_id"],
                )
                for a in add_on_rows.mappings().all()
            ],
            deposits=[
                BookingDeposit(
                    deposit_id=d["deposit_id"],
                    amount=d["amount"],
                    status=DepositStatus(d["status"]),
                    booking_id=d["booking_id"],
                )
                for d in deposit_rows.mappings().all()
            ],
        )

    @staticmethod
    def _to_row(booking: Booking) -> dict[str, Any]:
        return {
            "id": booking.id,
            "renter_id": booking.renter_id,
            "lender_id": booking.lender_id,
            "listing_id": booking.listing_id,
            "variant_id": booking.variant_id,
            "start_date": booking.start_date,
            "end_date": booking.end_date,
            "quantity": booking.quantity,
            "rental_duration": booking.rental_duration,
            "base_amount": booking.base_amount,
            "variant_amount": booking.variant_amount,
            "add_ons_amount": booking.add_ons_amount,
            "subtotal": booking.subtotal,
            "deposit_amount": booking.deposit_amount,
            "total_price": booking.total_price,
            "status": booking.status.value,
            "payment_status": booking.payment_status.value,
            "confirmed_at": booking.confirmed_at,
            "cancelled_at": booking.cancelled_at,
            "completed_at": booking.completed_at,
            "cancellation_reason": booking.cancellation_reason,
            "renter_email": booking.renter_email,
            "stripe_session_id": booking.stripe_session_id,
            "payment_intent_id": booking.payment_intent_id,
            "payment_error": booking.payment_error,
            "version": booking.version,
            "created_at": booking.created_at,
            "updated_at": booking.updated_at,
        }
