# backend/gemhub/models.py
import enum
from datetime import date, datetime, timezone
from decimal import Decimal

from sqlalchemy import String, Date, DateTime, ForeignKey, Enum, Numeric, UniqueConstraint, Integer, Index
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


# Enums help enforce data integrity at the database level
class TransactionType(str, enum.Enum):
    BUY = "buy"
    SELL = "sell"
    DIVIDEND = "dividend"


class TransactionSource(str, enum.Enum):
    NEW_MONEY = "new_money"
    REINVESTMENT = "reinvestment"


class AssetCategory(str, enum.Enum):
    """
    Asset categories tracked by the portfolio.

    Category-specific data (native currency, default sector, simulated
    volatility) lives in services.constants.CATEGORY_PROFILES and is exposed
    through the properties below.
    """
    CRYPTO = "crypto"
    FII = "fii"

    @property
    def native_currency(self) -> str:
        from gemhub.services.constants import CATEGORY_PROFILES
        return CATEGORY_PROFILES[self].native_currency

    @property
    def default_sector(self) -> str:
        from gemhub.services.constants import CATEGORY_PROFILES
        return CATEGORY_PROFILES[self].default_sector


class RiskProfile(str, enum.Enum):
    CONSERVADOR = "conservador"
    MODERADO = "moderado"
    ARROJADO = "arrojado"


class Portfolio(Base):
    """
    A user's wallet: profile data plus the ordered set of assets.

    Assets are unique by ticker within a portfolio. They are created on the
    first transaction for an unseen ticker and never deleted explicitly.
    """
    __tablename__ = "portfolios"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String)
    email: Mapped[str | None] = mapped_column(String, nullable=True)
    risk_profile: Mapped[RiskProfile] = mapped_column(Enum(RiskProfile), default=RiskProfile.MODERADO)
    preferred_currency: Mapped[str] = mapped_column(String, default="BRL")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    assets: Mapped[list["Asset"]] = relationship(
        back_populates="portfolio",
        cascade="all, delete-orphan",
        order_by="Asset.id",
    )


class Asset(Base):
    """
    One tracked holding inside a portfolio.

    average_price and total_quantity are a cache of the position derived from
    the transaction ledger. Only LedgerService.refresh_position writes them.
    """
    __tablename__ = "assets"
    __table_args__ = (
        UniqueConstraint('portfolio_id', 'ticker', name='uq_portfolio_ticker'),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    portfolio_id: Mapped[int] = mapped_column(ForeignKey("portfolios.id"), index=True)
    ticker: Mapped[str] = mapped_column(String, index=True)  # e.g. "BTC", "MXRF11"
    category: Mapped[AssetCategory] = mapped_column(Enum(AssetCategory))
    sector: Mapped[str] = mapped_column(String)

    # Derived position (cache)
    average_price: Mapped[Decimal] = mapped_column(Numeric(18, 8), default=Decimal("0"))
    total_quantity: Mapped[Decimal] = mapped_column(Numeric(18, 8), default=Decimal("0"))

    # Market data, in the category's native currency
    current_price: Mapped[Decimal] = mapped_column(Numeric(18, 8), default=Decimal("0"))
    daily_change: Mapped[Decimal] = mapped_column(Numeric(18, 8), default=Decimal("0"))  # percent

    target_allocation: Mapped[Decimal | None] = mapped_column(Numeric(9, 4), nullable=True, default=None)
    prov_dividend: Mapped[Decimal | None] = mapped_column(Numeric(18, 8), nullable=True, default=None)  # monthly, native currency
    dividend_yield: Mapped[Decimal | None] = mapped_column(Numeric(9, 4), nullable=True, default=None)
    price_to_book: Mapped[Decimal | None] = mapped_column(Numeric(9, 4), nullable=True, default=None)
    vacancy: Mapped[Decimal | None] = mapped_column(Numeric(9, 4), nullable=True, default=None)

    last_update: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    portfolio: Mapped["Portfolio"] = relationship(back_populates="assets")
    transactions: Mapped[list["Transaction"]] = relationship(
        back_populates="asset",
        cascade="all, delete-orphan",
        order_by="Transaction.seq",
    )


class Transaction(Base):
    __tablename__ = "transactions"
    __table_args__ = (
        # "Get the ledger of asset A in chronological order"
        Index('ix_transaction_asset_date', 'asset_id', 'date'),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    asset_id: Mapped[int] = mapped_column(ForeignKey("assets.id"), index=True)
    seq: Mapped[int] = mapped_column(Integer)  # insertion order within the asset
    transaction_type: Mapped[TransactionType] = mapped_column(Enum(TransactionType))
    source: Mapped[TransactionSource] = mapped_column(Enum(TransactionSource), default=TransactionSource.NEW_MONEY)
    date: Mapped[date] = mapped_column(Date, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    # Numeric(18, 8) supports crypto fractions down to 1 satoshi
    quantity: Mapped[Decimal] = mapped_column(Numeric(18, 8))
    price: Mapped[Decimal] = mapped_column(Numeric(18, 8))
    fees: Mapped[Decimal] = mapped_column(Numeric(18, 8), default=Decimal("0"))

    asset: Mapped["Asset"] = relationship(back_populates="transactions")
