from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
)

metadata = MetaData()

quotes = Table(
    "quotes",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("user_id", String(64), nullable=False, index=True),
    Column("status", String(32), nullable=False),
    Column("subtotal", Numeric(12, 2), nullable=False, default=0),
    Column("discount", Numeric(12, 2), nullable=False, default=0),
    Column("taxes", Numeric(12, 2), nullable=False, default=0),
    Column("total", Numeric(12, 2), nullable=False, default=0),
    Column("currency", String(3), nullable=False),
    Column("promo_code", String(50)),
    Column("promo_type", String(16)),
    Column("promo_value", Numeric(12, 2)),
    Column("promo_max_discount", Numeric(12, 2)),
    Column("expires_at", DateTime(timezone=True)),
    Column("lock_version", Integer, nullable=False, default=0),
    Column("created_at", DateTime(timezone=True)),
    Column("updated_at", DateTime(timezone=True)),
)

# Un solo borrador por usuario, validado al escribir
Index(
    "uq_quotes_one_draft_per_user",
    quotes.c.user_id,
    unique=True,
    sqlite_where=quotes.c.status == "draft",
    postgresql_where=quotes.c.status == "draft",
)

quote_items = Table(
    "quote_items",
    metadata,
    Column("id", String(36), primary_key=True),
    Column(
        "quote_id",
        String(36),
        ForeignKey("quotes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column("service_type", String(16), nullable=False),
    Column("service_id", String(255), nullable=False),
    Column("service_name", String(255), nullable=False),
    Column("service_details", JSON, nullable=False),
    Column("travelers", JSON),
    Column("price", Numeric(12, 2), nullable=False),
    Column("currency", String(3), nullable=False),
    Column("expires_at", DateTime(timezone=True)),
    Column("created_at", DateTime(timezone=True)),
)

promo_codes = Table(
    "promo_codes",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("code", String(50), nullable=False, unique=True),
    Column("name", String(255), nullable=False),
    Column("description", Text),
    Column("type", String(16), nullable=False),
    Column("value", Numeric(12, 2), nullable=False),
    Column("min_order_amount", Numeric(12, 2)),
    Column("max_discount_amount", Numeric(12, 2)),
    Column("usage_limit", Integer),
    Column("usage_count", Integer, nullable=False, default=0),
    Column("per_user_limit", Integer),
    Column("valid_from", DateTime(timezone=True)),
    Column("valid_until", DateTime(timezone=True)),
    Column("status", String(16), nullable=False),
    Column("applicable_services", JSON),
    Column("applicable_currencies", JSON),
    Column("first_order_only", Boolean, nullable=False, default=False),
    Column("metadata_json", JSON),
    Column("created_at", DateTime(timezone=True)),
    Column("updated_at", DateTime(timezone=True)),
)

promo_code_usages = Table(
    "promo_code_usages",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("user_id", String(64), nullable=False),
    Column("promo_code_id", String(36), ForeignKey("promo_codes.id"), nullable=False),
    Column("order_id", String(36), nullable=False),
    Column("discount_amount", Numeric(12, 2), nullable=False),
    Column("order_amount", Numeric(12, 2), nullable=False),
    Column("currency", String(3), nullable=False),
    Column("applied_at", DateTime(timezone=True)),
    Index("ix_promo_code_usages_user_promo", "user_id", "promo_code_id"),
)

orders = Table(
    "orders",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("user_id", String(64), nullable=False, index=True),
    Column("quote_id", String(36)),
    Column("order_number", String(50), nullable=False, unique=True),
    Column("status", String(32), nullable=False),
    Column("subtotal", Numeric(12, 2), nullable=False),
    Column("discount", Numeric(12, 2), nullable=False),
    Column("taxes", Numeric(12, 2), nullable=False),
    Column("total", Numeric(12, 2), nullable=False),
    Column("currency", String(3), nullable=False),
    Column("promo_code", String(50)),
    Column("payment_method", String(32)),
    Column("payment_reference", String(255)),
    Column("paid_at", DateTime(timezone=True)),
    Column("cancelled_at", DateTime(timezone=True)),
    Column("cancellation_reason", String(500)),
    Column("created_at", DateTime(timezone=True)),
    Column("updated_at", DateTime(timezone=True)),
)

sub_bookings = Table(
    "sub_bookings",
    metadata,
    Column("id", String(36), primary_key=True),
    Column(
        "order_id",
        String(36),
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column("service_type", String(16), nullable=False),
    Column("title", String(255)),
    Column("provider_booking_reference", String(64), nullable=False),
    Column("status", String(32), nullable=False),
    Column("details", JSON, nullable=False),
    Column("travelers", JSON),
    Column("price", Numeric(12, 2), nullable=False),
    Column("currency", String(3), nullable=False),
    Column("service_date", DateTime(timezone=True)),
    Column("documents", JSON),
    Column("confirmed_at", DateTime(timezone=True)),
    Column("cancelled_at", DateTime(timezone=True)),
    Column("created_at", DateTime(timezone=True)),
)

payments = Table(
    "payments",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("user_id", String(64), nullable=False, index=True),
    Column("order_id", String(36), ForeignKey("orders.id"), nullable=False, index=True),
    Column("idempotency_key", String(128), nullable=False, unique=True),
    Column("amount", Numeric(12, 2), nullable=False),
    Column("currency", String(3), nullable=False),
    Column("method", String(32), nullable=False),
    Column("status", String(32), nullable=False),
    Column("gateway_reference", String(255)),
    Column("failure_reason", String(500)),
    Column("refunded_amount", Numeric(12, 2), nullable=False, default=0),
    Column("created_at", DateTime(timezone=True)),
    Column("completed_at", DateTime(timezone=True)),
    Column("failed_at", DateTime(timezone=True)),
)

outbox_events = Table(
    "outbox_events",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("event_type", String(64), nullable=False),
    Column("aggregate_type", String(32), nullable=False),
    Column("aggregate_code", String(64)),
    Column("payload", JSON, nullable=False),
    Column("status", String(16), nullable=False, default="NEW"),
    Column("attempts", Integer, nullable=False, default=0),
    Column("next_attempt_at", DateTime(timezone=True)),
    Column("locked_by", String(64)),
    Column("locked_at", DateTime(timezone=True)),
    Column("lock_expires_at", DateTime(timezone=True)),
    Column("error_code", String(64)),
    Column("error_message", String(500)),
    Column("created_at", DateTime(timezone=True)),
    Column("updated_at", DateTime(timezone=True)),
)
