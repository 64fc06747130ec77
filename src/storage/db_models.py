"""SQLAlchemy database models.

Maps domain models to PostgreSQL tables.
"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Numeric,
    String,
    Text,
)
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import DeclarativeBase, relationship

from src.models.incentive import DiscountType
from src.models.verification import VerificationStatus


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class UserTable(Base):
    """Member account table (identity lives with the auth provider)."""

    __tablename__ = "users"

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid4)
    email = Column(String(254), nullable=False, unique=True)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    service_type = Column(String(2), nullable=True)
    military_branch = Column(String(50), nullable=True)
    is_admin = Column(Boolean, nullable=False, default=False)
    telegram_user_id = Column(BigInteger, nullable=True, unique=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    verification_request = relationship(
        "VerificationRequestTable", back_populates="user", uselist=False
    )

    __table_args__ = (Index("ix_users_email", email),)


class BusinessTable(Base):
    """Business table; chain parents and chain locations share it."""

    __tablename__ = "businesses"

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid4)
    name = Column(String(200), nullable=False)
    address1 = Column(String(200), nullable=False, default="")
    address2 = Column(String(200), nullable=True)
    city = Column(String(100), nullable=False, default="")
    state = Column(String(50), nullable=False, default="")
    zip_code = Column(String(20), nullable=False, default="")
    latitude = Column(Numeric(9, 6), nullable=True)
    longitude = Column(Numeric(9, 6), nullable=True)
    business_type = Column(String(50), nullable=True)
    phone = Column(String(30), nullable=True)
    google_place_id = Column(String(300), nullable=True, unique=True)
    chain_id = Column(
        PG_UUID(as_uuid=True),
        ForeignKey("businesses.id", ondelete="SET NULL"),
        nullable=True,
    )
    is_chain = Column(Boolean, nullable=False, default=False)
    status = Column(String(20), nullable=False, default="active")
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    chain = relationship("BusinessTable", remote_side=[id])
    incentives = relationship("IncentiveTable", back_populates="business")
    chain_incentives = relationship("ChainIncentiveTable", back_populates="chain")

    __table_args__ = (
        CheckConstraint(
            "NOT (is_chain AND chain_id IS NOT NULL)",
            name="check_chain_role",
        ),
        Index("ix_businesses_name_city_state", name, city, state),
        Index("ix_businesses_chain_id", chain_id),
        Index("ix_businesses_status", status),
        Index("ix_businesses_location", latitude, longitude),
    )


class IncentiveTable(Base):
    """Location-specific incentive table."""

    __tablename__ = "incentives"

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid4)
    business_id = Column(
        PG_UUID(as_uuid=True),
        ForeignKey("businesses.id", ondelete="CASCADE"),
        nullable=False,
    )
    eligible_categories = Column(JSON, nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    discount_type = Column(
        Enum(DiscountType, native_enum=True, values_callable=_enum_values),
        nullable=False,
        default=DiscountType.PERCENTAGE,
    )
    information = Column(Text, nullable=True)
    other_description = Column(Text, nullable=False, default="")
    is_available = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    business = relationship("BusinessTable", back_populates="incentives")

    __table_args__ = (
        CheckConstraint("amount >= 0", name="check_incentive_amount"),
        Index("ix_incentives_business_available", business_id, is_available),
    )


class ChainIncentiveTable(Base):
    """Chain-wide incentive table, owned by a chain parent business."""

    __tablename__ = "chain_incentives"

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid4)
    chain_id = Column(
        PG_UUID(as_uuid=True),
        ForeignKey("businesses.id", ondelete="CASCADE"),
        nullable=False,
    )
    eligible_categories = Column(JSON, nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    discount_type = Column(
        Enum(DiscountType, native_enum=True, values_callable=_enum_values),
        nullable=True,
    )
    description = Column(Text, nullable=True)
    information = Column(Text, nullable=True)
    other_description = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=True, default=True)
    created_at = Column(DateTime, nullable=True, default=datetime.utcnow)

    chain = relationship("BusinessTable", back_populates="chain_incentives")

    __table_args__ = (
        CheckConstraint("amount >= 0 AND amount <= 100", name="check_chain_incentive_amount"),
        Index("ix_chain_incentives_chain_active", chain_id, is_active),
    )


class VerificationRequestTable(Base):
    """Veteran verification request table, one per user."""

    __tablename__ = "verification_requests"

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(
        PG_UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    service_type = Column(String(2), nullable=True)
    military_branch = Column(String(50), nullable=True)
    documents = Column(JSON, nullable=False, default=list)
    status = Column(
        Enum(VerificationStatus, native_enum=True, values_callable=_enum_values),
        nullable=False,
        default=VerificationStatus.PENDING,
    )
    reviewer_notes = Column(Text, nullable=True)
    reviewed_by = Column(String(100), nullable=True)
    reviewed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("UserTable", back_populates="verification_request")

    __table_args__ = (
        Index("ix_verification_requests_status_created", status, created_at),
    )
