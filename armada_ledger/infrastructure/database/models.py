"""SQLAlchemy ORM models for investors, units, transactions and payouts"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, Float, DateTime, Date, ForeignKey, Text, Uuid
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Investor(Base):
    """Investor funding vehicle units"""

    __tablename__ = "investor"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False)
    contact_info = Column(Text, nullable=True)
    bank_account_details = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    margin_percentage = Column(Float, nullable=False, default=50)
    user_id = Column(Text, nullable=True, unique=True, index=True)  # Linked login identity
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    units = relationship("Unit", back_populates="investor", cascade="all, delete-orphan")
    payment_histories = relationship("PaymentHistory", back_populates="investor", cascade="all, delete-orphan")


class Unit(Base):
    """Vehicle asset owned by one investor"""

    __tablename__ = "unit"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    investor_id = Column(Uuid(as_uuid=True), ForeignKey("investor.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(Text, nullable=False)
    plate_number = Column(Text, nullable=False)
    code = Column(String(64), nullable=False, unique=True)
    image_url = Column(Text, nullable=True)
    tax_due_date = Column(Date, nullable=True)
    status = Column(Text, nullable=False, default="AVAILABLE")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    investor = relationship("Investor", back_populates="units")
    transactions = relationship(
        "Transaction",
        back_populates="unit",
        cascade="all, delete-orphan",
        order_by="Transaction.created_at",
    )


class Transaction(Base):
    """Buy/sell cycle of a unit"""

    __tablename__ = "vehicle_transaction"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    unit_id = Column(Uuid(as_uuid=True), ForeignKey("unit.id", ondelete="CASCADE"), nullable=False, index=True)
    transaction_code = Column(String(64), nullable=False, unique=True)
    status = Column(Text, nullable=False, default="ON_PROCESS")
    buy_date = Column(Date, nullable=False)
    buy_price = Column(Float, nullable=False)
    initial_investor_capital = Column(Float, nullable=True)
    initial_manager_capital = Column(Float, nullable=True)
    sell_date = Column(Date, nullable=True)
    sell_price = Column(Float, nullable=True)
    profit_status = Column(Text, nullable=True)
    loss_bearer = Column(Text, nullable=True)
    payment_status = Column(Text, nullable=False, default="UNPAID")
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)  # Load order for dashboards
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    unit = relationship("Unit", back_populates="transactions")
    costs = relationship("Cost", back_populates="transaction", cascade="all, delete-orphan")
    profit_sharing = relationship(
        "ProfitSharing", back_populates="transaction", uselist=False, cascade="all, delete-orphan"
    )
    payment_histories = relationship("PaymentHistory", back_populates="transaction", cascade="all, delete-orphan")


class Cost(Base):
    """Operating cost paid by the investor or the manager"""

    __tablename__ = "cost"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    transaction_id = Column(
        Uuid(as_uuid=True), ForeignKey("vehicle_transaction.id", ondelete="CASCADE"), nullable=False, index=True
    )
    cost_type = Column(Text, nullable=False)
    payer = Column(Text, nullable=False)
    amount = Column(Float, nullable=False)
    description = Column(Text, nullable=True)
    date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    transaction = relationship("Transaction", back_populates="costs")


class ProfitSharing(Base):
    """Profit split recorded when a transaction completes"""

    __tablename__ = "profit_sharing"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    transaction_id = Column(
        Uuid(as_uuid=True), ForeignKey("vehicle_transaction.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    total_capital_investor = Column(Float, nullable=False)
    total_capital_manager = Column(Float, nullable=False)
    total_capital = Column(Float, nullable=False)
    net_margin = Column(Float, nullable=False)
    investor_share_percentage = Column(Float, nullable=False)
    manager_share_percentage = Column(Float, nullable=False)
    investor_profit_amount = Column(Float, nullable=False)
    manager_profit_amount = Column(Float, nullable=False)
    calculated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    transaction = relationship("Transaction", back_populates="profit_sharing")


class PaymentHistory(Base):
    """Payout from the manager to an investor"""

    __tablename__ = "payment_history"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    transaction_id = Column(
        Uuid(as_uuid=True), ForeignKey("vehicle_transaction.id", ondelete="CASCADE"), nullable=True, index=True
    )
    investor_id = Column(Uuid(as_uuid=True), ForeignKey("investor.id", ondelete="CASCADE"), nullable=False, index=True)
    amount = Column(Float, nullable=False)
    payment_date = Column(DateTime(timezone=True), nullable=False)
    method = Column(Text, nullable=False, default="TRANSFER")
    proof_image_url = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    transaction = relationship("Transaction", back_populates="payment_histories")
    investor = relationship("Investor", back_populates="payment_histories")


class ActivityLog(Base):
    """Audit trail of create/update/delete actions"""

    __tablename__ = "activity_log"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    action = Column(Text, nullable=False)  # CREATE | UPDATE | DELETE
    entity = Column(Text, nullable=False)  # UNIT | TRANSACTION | INVESTOR | COST | PAYMENT
    entity_id = Column(Text, nullable=False)
    details = Column(Text, nullable=False)
    user_id = Column(Text, nullable=False)
    user_name = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
