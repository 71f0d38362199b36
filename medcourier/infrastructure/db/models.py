# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import uuid
from datetime import UTC, date, datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from medcourier.domain.enums import (
    DriverStatus,
    FleetRole,
    InvoiceStatus,
    LoadStatus,
    PaymentTerms,
)

from .session import Base


def new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; everything is stored in UTC."""

    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class Fleet(Base):
    __tablename__ = "fleets"
    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(128))
    owner_id: Mapped[str | None] = mapped_column(String(32), nullable=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    drivers: Mapped[list[Driver]] = relationship("Driver", back_populates="fleet")


class Driver(Base):
    __tablename__ = "drivers"
    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    email: Mapped[str] = mapped_column(String(254), unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(256))
    first_name: Mapped[str] = mapped_column(String(64))
    last_name: Mapped[str] = mapped_column(String(64))
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    status: Mapped[str] = mapped_column(
        String(24), default=DriverStatus.PENDING_APPROVAL.value, index=True
    )
    fleet_id: Mapped[str | None] = mapped_column(
        ForeignKey("fleets.id", ondelete="SET NULL"), nullable=True, index=True
    )
    fleet_role: Mapped[str] = mapped_column(String(16), default=FleetRole.INDEPENDENT.value)
    is_admin: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="0"
    )
    license_number: Mapped[str | None] = mapped_column(String(64), nullable=True)
    license_expiry: Mapped[date | None] = mapped_column(Date, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )
    fleet: Mapped[Fleet | None] = relationship("Fleet", back_populates="drivers")
    vehicles: Mapped[list[Vehicle]] = relationship(
        "Vehicle", back_populates="driver", cascade="all,delete"
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Shipper(Base):
    __tablename__ = "shippers"
    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    email: Mapped[str] = mapped_column(String(254), unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(256))
    company_name: Mapped[str] = mapped_column(String(128))
    contact_name: Mapped[str] = mapped_column(String(128))
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    payment_terms: Mapped[str] = mapped_column(String(16), default=PaymentTerms.NET_14.value)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default="1"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, index=True
    )
    facilities: Mapped[list[Facility]] = relationship(
        "Facility", back_populates="shipper", cascade="all,delete"
    )


class AdminUser(Base):
    __tablename__ = "admin_users"
    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    email: Mapped[str] = mapped_column(String(254), unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(256))
    name: Mapped[str] = mapped_column(String(128))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class LoginAttempt(Base):
    __tablename__ = "login_attempts"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    email: Mapped[str] = mapped_column(String(254), index=True)
    user_type: Mapped[str] = mapped_column(String(16), index=True)
    ip_address: Mapped[str | None] = mapped_column(String(64), nullable=True)
    success: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, index=True
    )


class PasswordResetToken(Base):
    __tablename__ = "password_reset_tokens"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    token: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    user_id: Mapped[str] = mapped_column(String(32), index=True)
    user_type: Mapped[str] = mapped_column(String(16))
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
    used: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class Vehicle(Base):
    __tablename__ = "vehicles"
    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    driver_id: Mapped[str] = mapped_column(
        ForeignKey("drivers.id", ondelete="CASCADE"), index=True
    )
    vehicle_type: Mapped[str] = mapped_column(String(32))
    make: Mapped[str | None] = mapped_column(String(64), nullable=True)
    model: Mapped[str | None] = mapped_column(String(64), nullable=True)
    year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    vehicle_plate: Mapped[str] = mapped_column(String(32))
    registration_expiry_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default="1"
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    driver: Mapped[Driver] = relationship("Driver", back_populates="vehicles")


class Facility(Base):
    __tablename__ = "facilities"
    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    shipper_id: Mapped[str] = mapped_column(
        ForeignKey("shippers.id", ondelete="CASCADE"), index=True
    )
    name: Mapped[str] = mapped_column(String(128))
    facility_type: Mapped[str] = mapped_column(String(32), default="OTHER")
    address_line1: Mapped[str] = mapped_column(String(256))
    address_line2: Mapped[str | None] = mapped_column(String(256), nullable=True)
    city: Mapped[str] = mapped_column(String(128))
    state: Mapped[str] = mapped_column(String(64))
    postal_code: Mapped[str] = mapped_column(String(16))
    contact_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    contact_phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    access_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    shipper: Mapped[Shipper] = relationship("Shipper", back_populates="facilities")


class Invoice(Base):
    __tablename__ = "invoices"
    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    invoice_number: Mapped[str] = mapped_column(String(32), unique=True, index=True)
    shipper_id: Mapped[str] = mapped_column(ForeignKey("shippers.id"), index=True)
    invoice_date: Mapped[date] = mapped_column(Date)
    due_date: Mapped[date] = mapped_column(Date)
    subtotal: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    tax: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    total: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    status: Mapped[str] = mapped_column(String(16), default=InvoiceStatus.DRAFT.value, index=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    sent_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    paid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    loads: Mapped[list[LoadRequest]] = relationship("LoadRequest", back_populates="invoice")


class LoadRequest(Base):
    __tablename__ = "load_requests"
    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    tracking_code: Mapped[str] = mapped_column(String(24), unique=True, index=True)
    shipper_id: Mapped[str] = mapped_column(ForeignKey("shippers.id"), index=True)
    pickup_facility_id: Mapped[str] = mapped_column(ForeignKey("facilities.id"), index=True)
    dropoff_facility_id: Mapped[str] = mapped_column(ForeignKey("facilities.id"), index=True)
    driver_id: Mapped[str | None] = mapped_column(
        ForeignKey("drivers.id"), nullable=True, index=True
    )
    service_type: Mapped[str] = mapped_column(String(32))
    commodity_description: Mapped[str] = mapped_column(Text)
    temperature_requirement: Mapped[str] = mapped_column(String(24), default="AMBIENT")
    ready_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    delivery_deadline: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    status: Mapped[str] = mapped_column(String(24), default=LoadStatus.NEW.value, index=True)
    quote_amount: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    quote_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    cancellation_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    accepted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    picked_up_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    delivered_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    invoice_id: Mapped[str | None] = mapped_column(
        ForeignKey("invoices.id", ondelete="SET NULL"), nullable=True, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )
    shipper: Mapped[Shipper] = relationship("Shipper")
    pickup_facility: Mapped[Facility] = relationship(
        "Facility", foreign_keys=[pickup_facility_id]
    )
    dropoff_facility: Mapped[Facility] = relationship(
        "Facility", foreign_keys=[dropoff_facility_id]
    )
    driver: Mapped[Driver | None] = relationship("Driver")
    invoice: Mapped[Invoice | None] = relationship("Invoice", back_populates="loads")
    events: Mapped[list[TrackingEvent]] = relationship(
        "TrackingEvent",
        back_populates="load_request",
        cascade="all,delete",
        order_by="TrackingEvent.created_at",
    )
    documents: Mapped[list[Document]] = relationship(
        "Document", back_populates="load_request", cascade="all,delete"
    )


class TrackingEvent(Base):
    __tablename__ = "tracking_events"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    load_request_id: Mapped[str] = mapped_column(
        ForeignKey("load_requests.id", ondelete="CASCADE"), index=True
    )
    code: Mapped[str] = mapped_column(String(32))
    label: Mapped[str] = mapped_column(String(128))
    location_text: Mapped[str | None] = mapped_column(String(256), nullable=True)
    actor_type: Mapped[str] = mapped_column(String(16))
    actor_id: Mapped[str | None] = mapped_column(String(32), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    load_request: Mapped[LoadRequest] = relationship("LoadRequest", back_populates="events")


class Document(Base):
    __tablename__ = "documents"
    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    load_request_id: Mapped[str] = mapped_column(
        ForeignKey("load_requests.id", ondelete="CASCADE"), index=True
    )
    document_type: Mapped[str] = mapped_column(String(32))
    title: Mapped[str] = mapped_column(String(256))
    file_url: Mapped[str] = mapped_column(String(1024))
    mime_type: Mapped[str | None] = mapped_column(String(128), nullable=True)
    file_size: Mapped[int | None] = mapped_column(Integer, nullable=True)
    uploaded_by_type: Mapped[str] = mapped_column(String(16))
    uploaded_by_id: Mapped[str] = mapped_column(String(32))
    is_locked: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="0"
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    load_request: Mapped[LoadRequest] = relationship("LoadRequest", back_populates="documents")


class Notification(Base):
    __tablename__ = "notifications"
    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    driver_id: Mapped[str | None] = mapped_column(
        ForeignKey("drivers.id", ondelete="CASCADE"), nullable=True, index=True
    )
    shipper_id: Mapped[str | None] = mapped_column(
        ForeignKey("shippers.id", ondelete="CASCADE"), nullable=True, index=True
    )
    load_request_id: Mapped[str | None] = mapped_column(
        ForeignKey("load_requests.id", ondelete="CASCADE"), nullable=True, index=True
    )
    type: Mapped[str] = mapped_column(String(48), index=True)
    title: Mapped[str] = mapped_column(String(256))
    message: Mapped[str] = mapped_column(Text)
    link: Mapped[str | None] = mapped_column(String(512), nullable=True)
    metadata_json: Mapped[str | None] = mapped_column(Text, nullable=True)
    subject_key: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    is_read: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="0"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, index=True
    )


class DriverRating(Base):
    __tablename__ = "driver_ratings"
    __table_args__ = (UniqueConstraint("load_request_id", name="u_rating_load"),)
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    driver_id: Mapped[str] = mapped_column(
        ForeignKey("drivers.id", ondelete="CASCADE"), index=True
    )
    shipper_id: Mapped[str] = mapped_column(ForeignKey("shippers.id", ondelete="CASCADE"))
    load_request_id: Mapped[str] = mapped_column(
        ForeignKey("load_requests.id", ondelete="CASCADE")
    )
    rating: Mapped[int] = mapped_column(Integer)
    feedback: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


__all__ = [
    "AdminUser",
    "Document",
    "Driver",
    "DriverRating",
    "Facility",
    "Fleet",
    "Invoice",
    "LoadRequest",
    "LoginAttempt",
    "Notification",
    "PasswordResetToken",
    "Shipper",
    "TrackingEvent",
    "Vehicle",
    "as_utc",
    "new_id",
    "utcnow",
]
