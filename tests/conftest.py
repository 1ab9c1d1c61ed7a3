"""
Pytest configuration and shared fixtures.

Este módulo provee fixtures reutilizables para:
- Cliente HTTP de prueba (FastAPI TestClient) sobre los adaptadores in-memory
- Base de datos SQLite temporal para tests de repositorios SQL
- Datos de prueba (artículos, prestadores, reservas)
- Firma de webhooks de Stripe
"""

import hashlib
import hmac
import json
import os
import time
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, AsyncGenerator, Generator

# Settings are read on first import of the app; configure them before that.
os.environ["USE_IN_MEMORY"] = "true"
os.environ["STRIPE_SECRET_KEY"] = "sk_test_bookings"
os.environ["STRIPE_WEBHOOK_SECRET"] = "whsec_test_bookings"
os.environ.pop("DATABASE_URL", None)

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine  # noqa: E402

from app.api.dependencies import _in_memory_bundle  # noqa: E402
from app.domain.entities.booking import Booking, BookingDeposit  # noqa: E402
from app.domain.entities.listing import (  # noqa: E402
    LenderProfile,
    Listing,
    ListingAddOn,
    ListingDeposit,
    ListingVariant,
    PricingType,
)
from app.infrastructure.db.engine import build_sessionmaker  # noqa: E402
from app.infrastructure.db.tables import metadata  # noqa: E402
from app.main import app  # noqa: E402

WEBHOOK_SECRET = os.environ["STRIPE_WEBHOOK_SECRET"]
RENTER_ID = "renter-1"
LENDER_ID = "lender-1"
LISTING_ID = "listing-1"
FIXED_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


# ============================================================================
# HELPERS
# ============================================================================

def sign_payload(payload: bytes, secret: str = WEBHOOK_SECRET, timestamp: int | None = None) -> str:
    """Construye un header Stripe-Signature válido para el payload."""
    timestamp = timestamp or int(time.time())
    signed = f"{timestamp}.{payload.decode('utf-8')}".encode("utf-8")
    signature = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={signature}"


def stripe_event(event_id: str, event_type: str, data_object: dict[str, Any]) -> bytes:
    return json.dumps(
        {"id": event_id, "type": event_type, "data": {"object": data_object}}
    ).encode("utf-8")


def make_listing(
    listing_id: str = LISTING_ID,
    lender_id: str = LENDER_ID,
    base_price: str = "100.00",
    deposit: str | None = "50.00",
    pricing_type: PricingType = PricingType.DAILY,
    **overrides: Any,
) -> Listing:
    return Listing(
        id=listing_id,
        lender_id=lender_id,
        title=overrides.pop("title", "Party Tent 6x12"),
        base_price=Decimal(base_price),
        pricing_type=pricing_type,
        variants=overrides.pop(
            "variants", [ListingVariant(id="var-large", name="Large", price_adjustment=Decimal("20.00"))]
        ),
        add_ons=overrides.pop(
            "add_ons",
            [
                ListingAddOn(id="addon-lights", name="String lights", price=Decimal("15.00")),
                ListingAddOn(id="addon-setup", name="Setup", price=Decimal("30.00"), is_required=True),
            ],
        ),
        deposits=[ListingDeposit(id="dep-1", amount=Decimal(deposit))] if deposit else [],
        **overrides,
    )


def make_lender(
    user_id: str = LENDER_ID,
    stripe_account_id: str | None = "acct_lender_1",
    charges_enabled: bool = True,
) -> LenderProfile:
    return LenderProfile(
        id=f"profile-{user_id}",
        user_id=user_id,
        stripe_account_id=stripe_account_id,
        charges_enabled=charges_enabled,
        payouts_enabled=charges_enabled,
    )


def make_booking(booking_id: str = "booking-1", **overrides: Any) -> Booking:
    """Reserva pendiente de 2 días: alquiler 200.00 + depósito 50.00."""
    values: dict[str, Any] = {
        "id": booking_id,
        "renter_id": RENTER_ID,
        "lender_id": LENDER_ID,
        "listing_id": LISTING_ID,
        "start_date": date(2026, 3, 10),
        "end_date": date(2026, 3, 11),
        "rental_duration": 2,
        "base_amount": Decimal("200.00"),
        "subtotal": Decimal("200.00"),
        "deposit_amount": Decimal("50.00"),
        "total_price": Decimal("250.00"),
        "renter_email": "renter@example.com",
        "created_at": FIXED_NOW,
        "updated_at": FIXED_NOW,
        "deposits": [
            BookingDeposit(deposit_id="dep-1", amount=Decimal("50.00"), booking_id=booking_id)
        ],
    }
    values.update(overrides)
    return Booking(**values)


# ============================================================================
# FIXTURES DE CLIENTE HTTP
# ============================================================================

@pytest.fixture
def bundle() -> dict:
    """Adaptadores in-memory compartidos con la app (nuevos en cada test)."""
    _in_memory_bundle.cache_clear()
    return _in_memory_bundle()


@pytest.fixture
def seeded_bundle(bundle: dict) -> dict:
    bundle["listing_repo"].add(make_listing())
    bundle["lender_repo"].add(make_lender())
    return bundle


@pytest.fixture
def client(seeded_bundle: dict) -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client
    _in_memory_bundle.cache_clear()


@pytest.fixture
def unique_idem_key() -> str:
    """Idempotency key única para cada test."""
    import uuid
    return f"test_{uuid.uuid4().hex[:16]}"


@pytest.fixture
def booking_payload() -> dict:
    start = date.today() + timedelta(days=10)
    return {
        "listing_id": LISTING_ID,
        "start_date": start.isoformat(),
        "end_date": (start + timedelta(days=1)).isoformat(),
        "quantity": 1,
        "renter_email": "renter@example.com",
    }


# ============================================================================
# FIXTURES DE BASE DE DATOS
# ============================================================================

@pytest_asyncio.fixture
async def test_engine(tmp_path):
    """SQLite en archivo: cada sesión usa su propia conexión."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'bookings.db'}", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Sesión sin transacción abierta; el test decide cuándo hacer commit."""
    async with build_sessionmaker(test_engine)() as session:
        yield session


@pytest_asyncio.fixture
async def other_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Segunda sesión para simular un escritor concurrente."""
    async with build_sessionmaker(test_engine)() as session:
        yield session


# ============================================================================
# HOOKS DE PYTEST
# ============================================================================

def pytest_configure(config):
    config.addinivalue_line("markers", "integration: tests against the SQL adapters")


@pytest.fixture(autouse=True)
def reset_circuit_breakers():
    """
    Reset circuit breakers antes de cada test.
    Evita que tests fallen por breakers abiertos de tests anteriores.
    """
    from app.infrastructure.circuit_breaker import stripe_breaker

    stripe_breaker.close()
    yield
    stripe_breaker.close()
