from sqlalchemy import CheckConstraint, Column, Date, DateTime, Index, MetaData, String, Table, Text


metadata = MetaData()

booking = Table(
    "booking",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("name", String(200), nullable=False),
    Column("start_date", Date, nullable=False),
    Column("end_date", Date, nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("type", String(16), nullable=False, server_default="booking"),
    Column("note", Text, nullable=True),
    Column("color", String(32), nullable=True),
    CheckConstraint("start_date <= end_date", name="ck_booking_date_order"),
    CheckConstraint("type IN ('booking', 'wish')", name="ck_booking_type"),
    Index("ix_booking_dates", "start_date", "end_date"),
)
