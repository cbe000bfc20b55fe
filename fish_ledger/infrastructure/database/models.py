"""SQLAlchemy ORM models for the ledger"""

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Text,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class CustomerRecord(Base):
    """Registered customer; name_key enforces case-insensitive uniqueness"""

    __tablename__ = "customer"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    name_key = Column(Text, nullable=False, unique=True)
    phone = Column(Text, nullable=True)
    address = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)


class ProductRecord(Base):
    """Registered fish variety"""

    __tablename__ = "product"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    name_key = Column(Text, nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), nullable=False)


class TransactionRecord(Base):
    """Bill header with cached paid/remaining amounts"""

    __tablename__ = "ledger_transaction"
    __table_args__ = (
        CheckConstraint("total_paise >= 0", name="ck_transaction_total_non_negative"),
        CheckConstraint("paid_paise >= 0 AND paid_paise <= total_paise", name="ck_transaction_paid_range"),
        CheckConstraint("remaining_paise = total_paise - paid_paise", name="ck_transaction_remaining"),
        Index("ix_transaction_customer_created", "customer_name", "created_at"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    customer_name = Column(Text, nullable=False)
    total_paise = Column(BigInteger, nullable=False)
    paid_paise = Column(BigInteger, nullable=False, default=0)
    remaining_paise = Column(BigInteger, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)
    version = Column(Integer, nullable=False)

    items = relationship(
        "LineItemRecord",
        back_populates="transaction",
        cascade="all, delete-orphan",
        order_by="LineItemRecord.position",
    )
    payments = relationship(
        "PaymentRecord",
        back_populates="transaction",
        cascade="all, delete-orphan",
        order_by="PaymentRecord.position",
    )

    __mapper_args__ = {"version_id_col": version}


class LineItemRecord(Base):
    """Priced line on a bill; product_name is a copy, not a foreign key"""

    __tablename__ = "line_item"

    id = Column(Integer, primary_key=True, autoincrement=True)
    transaction_id = Column(Integer, ForeignKey("ledger_transaction.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False)
    product_name = Column(Text, nullable=False)
    quantity = Column(Text, nullable=False)
    unit_price_paise = Column(BigInteger, nullable=False)
    line_total_paise = Column(BigInteger, nullable=False)

    transaction = relationship("TransactionRecord", back_populates="items")


class PaymentRecord(Base):
    """Append-only payment row"""

    __tablename__ = "payment"
    __table_args__ = (CheckConstraint("amount_paise > 0", name="ck_payment_positive"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    transaction_id = Column(Integer, ForeignKey("ledger_transaction.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False)
    amount_paise = Column(BigInteger, nullable=False)
    note = Column(Text, nullable=False, default="")
    paid_at = Column(DateTime(timezone=True), nullable=False)

    transaction = relationship("TransactionRecord", back_populates="payments")
