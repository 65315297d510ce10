"""SQLAlchemy ORM model definitions."""

from sqlalchemy import (
    Column,
    String,
    DateTime,
    ForeignKey,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from cryptofolio.repositories.sqlalchemy.database import Base


class ExchangeORM(Base):
    """SQLAlchemy model for Exchange."""

    __tablename__ = "exchanges"

    id = Column(String(36), primary_key=True)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)

    assets = relationship(
        "AssetORM",
        back_populates="exchange",
        cascade="all, delete-orphan",
    )


class AssetORM(Base):
    """SQLAlchemy model for Asset. Decimal fields are kept as exact strings."""

    __tablename__ = "assets"
    __table_args__ = (UniqueConstraint("exchange_id", "symbol", name="uq_asset_exchange_symbol"),)

    id = Column(String(36), primary_key=True)
    exchange_id = Column(String(36), ForeignKey("exchanges.id"), nullable=False)
    symbol = Column(String(20), nullable=False)
    quantity = Column(String(64), nullable=False)
    purchase_price_avg = Column(String(64), nullable=False)
    last_updated = Column(DateTime(timezone=True), nullable=False)
    logo_url = Column(String(512), nullable=True)

    exchange = relationship("ExchangeORM", back_populates="assets")


class UserSettingsORM(Base):
    """SQLAlchemy model for user settings (single row)."""

    __tablename__ = "user_settings"

    id = Column(String(36), primary_key=True)
    initial_capital = Column(String(64), nullable=False, default="0")
    currency = Column(String(8), nullable=False, default="USD")
    updated_at = Column(DateTime(timezone=True), nullable=True)
