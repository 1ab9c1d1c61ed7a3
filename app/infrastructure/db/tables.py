from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
    UniqueConstraint,
)

metadata = MetaData()

lender_profiles = Table(
    "lender_profiles",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("user_id", String(36), nullable=False, unique=True),
    Column("stripe_account_id", String(64), unique=True),
    Column("charges_enabled", Boolean, nullable=False, default=False),
    Column("payouts_enabled", Boolean, nullable=False, default=False),
    Column("onboarding_completed", Boolean, nullable=False, default=False),
    Column("verification_status", String(16), nullable=False, default="pending"),
)

listings = Table(
    "listings",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("lender_id", String(36), nullable=False, index=True),
    Column("title", String(255), nullable=False),
    Column("base_price", Numeric(12, 2), nullable=False),
    Column("pricing_type", String(16), nullable=False, default="daily"),
    Column("min_rental_duration", Integer, nullable=False, default=1),
    Column("max_rental_duration", Integer),
    Column("quantity_available", Integer, nullable=False, default=1),
    Column("cover_image_url", String(500)),
)

listing_variants = Table(
    "listing_variants",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("listing_id", String(36), ForeignKey("listings.id"), nullable=False, index=True),
    Column("name", String(255), nullable=False),
    Column("price_adjustment", Numeric(12, 2), nullable=False, default=0),
)

listing_add_ons = Table(
    "listing_add_ons",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("listing_id", String(36), ForeignKey("listings.id"), nullable=False, index=True),
    Column("name", String(255), nullable=False),
    Column("price", Numeric(12, 2), nullable=False, default=0),
    Column("is_required", Boolean, nullable=False, default=False),
)

listing_deposits = Table(
    "listing_deposits",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("listing_id", String(36), ForeignKey("listings.id"), nullable=False, index=True),
    Column("amount", Numeric(12, 2), nullable=False),
)

bookings = Table(
    "bookings",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("renter_id", String(36), nullable=False, index=True),
    Column("lender_id", String(36), nullable=False, index=True),
    Column("listing_id", String(36), ForeignKey("listings.id"), nullable=False),
    Column("variant_id", String(36)),
    Column("start_date", Date, nullable=False),
    Column("end_date", Date, nullable=False),
    Column("quantity", Integer, nullable=False, default=1),
    Column("rental_duration", Integer, nullable=False, default=1),
    Column("base_amount", Numeric(12, 2), nullable=False),
    Column("variant_amount", Numeric(12, 2), nullable=False),
    Column("add_ons_amount", Numeric(12, 2), nullable=False),
    Column("subtotal", Numeric(12, 2), nullable=False),
    Column("deposit_amount", Numeric(12, 2), nullable=False),
    Column("total_price", Numeric(12, 2), nullable=False),
    Column("status", String(16), nullable=False),
    Column("payment_status", String(24), nullable=False),
    Column("confirmed_at", DateTime(timezone=True)),
    Column("cancelled_at", DateTime(timezone=True)),
    Column("completed_at", DateTime(timezone=True)),
    Column("cancellation_reason", Text),
    Column("renter_email", String(255)),
    Column("stripe_session_id", String(255)),
    Column("payment_intent_id", String(64), index=True),
    Column("payment_error", Text),
    Column("version", Integer, nullable=False, default=0),
    Column("created_at", DateTime(timezone=True)),
    Column("updated_at", DateTime(timezone=True)),
)

booking_add_ons = Table(
    "booking_add_ons",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("booking_id", String(36), ForeignKey("bookings.id"), nullable=False, index=True),
    Column("add_on_id", String(36), nullable=False),
    Column("name", String(255), nullable=False),
    Column("quantity", Integer, nullable=False),
    Column("price", Numeric(12, 2), nullable=False),
)

booking_deposits = Table(
    "booking_deposits",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("booking_id", String(36), ForeignKey("bookings.id"), nullable=False, index=True),
    Column("deposit_id", String(36), nullable=False),
    Column("amount", Numeric(12, 2), nullable=False),
    Column("status", String(16), nullable=False, default="pending"),
)

refunds = Table(
    "refunds",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("booking_id", String(36), ForeignKey("bookings.id"), nullable=False, index=True),
    Column("amount", Numeric(12, 2), nullable=False),
    Column("reason", String(255), nullable=False),
    Column("status", String(16), nullable=False),
    Column("stripe_refund_id", String(64), unique=True),
    Column("processed_at", DateTime(timezone=True)),
    Column("created_at", DateTime(timezone=True)),
)

payouts = Table(
    "payouts",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("lender_id", String(36), nullable=False, index=True),
    Column("amount", Numeric(12, 2), nullable=False),
    Column("status", String(16), nullable=False, default="pending"),
    Column("stripe_payout_id", String(64), nullable=False, unique=True),
    Column("paid_at", DateTime(timezone=True)),
    Column("failure_message", Text),
)

disputes = Table(
    "disputes",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("booking_id", String(36), ForeignKey("bookings.id"), nullable=False, index=True),
    Column("raised_by_id", String(36), nullable=False),
    Column("reason", String(64), nullable=False),
    Column("description", Text, nullable=False),
    Column("status", String(16), nullable=False),
    Column("stripe_dispute_id", String(64), nullable=False, unique=True),
    Column("created_at", DateTime(timezone=True)),
)

webhook_events = Table(
    "webhook_events",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("event_id", String(255), nullable=False, unique=True),
    Column("provider", String(32), nullable=False, default="stripe"),
    Column("event_type", String(64), nullable=False),
    Column("payload", JSON, nullable=False),
    Column("processed", Boolean, nullable=False, default=False),
    Column("processed_at", DateTime(timezone=True)),
    Column("processing_error", Text),
    Column("created_at", DateTime(timezone=True)),
)

audit_logs = Table(
    "audit_logs",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("entity_type", String(32), nullable=False),
    Column("entity_id", String(64), nullable=False, index=True),
    Column("action", String(64), nullable=False),
    Column("changes", JSON),
    Column("user_id", String(36)),
    Column("created_at", DateTime(timezone=True)),
)

idempotency_keys = Table(
    "idempotency_keys",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("scope", String(32), nullable=False),
    Column("idem_key", String(128), nullable=False),
    Column("request_hash", String(64), nullable=False),
    Column("booking_id", String(36), nullable=False),
    Column("response_body", JSON),
    Column("status_code", Integer, nullable=False, default=201),
    Column("created_at", DateTime(timezone=True)),
    UniqueConstraint("scope", "idem_key", name="uq_idempotency_scope_key"),
)
