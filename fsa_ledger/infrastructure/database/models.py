"""SQLAlchemy ORM models for employees, FSA accounts and their transactions"""

import uuid
from sqlalchemy import Column, String, Integer, Numeric, DateTime, Date, ForeignKey, Text, Uuid, Index, text
from sqlalchemy.orm import declarative_base, relationship

from fsa_ledger.domain.models import ACCOUNT_TYPE_DCFSA, STATUS_ACTIVE, TRANSACTION_PENDING
from fsa_ledger.utils.date_utils import utcnow

Base = declarative_base()

MONEY = Numeric(10, 2)


class Employee(Base):
    """Employee enrolled in benefits"""

    __tablename__ = "employees"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    first_name = Column(Text, nullable=False)
    last_name = Column(Text, nullable=False)
    email = Column(String(320), nullable=False, unique=True)
    employee_number = Column(String(64), nullable=False, unique=True)
    department = Column(Text, nullable=True)
    hire_date = Column(Date, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    fsa_accounts = relationship(
        "FSAAccount",
        back_populates="employee",
        order_by="FSAAccount.plan_year_start.desc()",
    )


class FSAAccount(Base):
    """Dependent care FSA account; current_balance is allocated-to-date"""

    __tablename__ = "fsa_accounts"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    employee_id = Column(Uuid(as_uuid=True), ForeignKey("employees.id"), nullable=False, index=True)
    account_type = Column(Text, nullable=False, default=ACCOUNT_TYPE_DCFSA)
    annual_limit = Column(MONEY, nullable=False)
    current_balance = Column(MONEY, nullable=False, default=0)
    used_amount = Column(MONEY, nullable=False, default=0)
    plan_year_start = Column(Date, nullable=False)
    plan_year_end = Column(Date, nullable=False)
    status = Column(Text, nullable=False, default=STATUS_ACTIVE)
    version = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    # UPDATEs carry "WHERE version = :loaded" and raise StaleDataError on mismatch
    __mapper_args__ = {"version_id_col": version}

    # At most one active account per employee and plan year
    __table_args__ = (
        Index(
            "uq_fsa_accounts_active_plan_year",
            "employee_id",
            "plan_year_start",
            unique=True,
            postgresql_where=text("status = 'active'"),
            sqlite_where=text("status = 'active'"),
        ),
    )

    employee = relationship("Employee", back_populates="fsa_accounts")
    transactions = relationship(
        "Transaction",
        back_populates="fsa_account",
        order_by="Transaction.created_at",
    )


class Transaction(Base):
    """Append-only ledger entry recorded against an FSA account"""

    __tablename__ = "transactions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    fsa_account_id = Column(Uuid(as_uuid=True), ForeignKey("fsa_accounts.id"), nullable=False, index=True)
    amount = Column(MONEY, nullable=False)
    description = Column(Text, nullable=False)
    transaction_date = Column(DateTime(timezone=True), nullable=False)
    transaction_type = Column(Text, nullable=False)  # "credit" or "debit"
    category = Column(Text, nullable=True)
    receipt_url = Column(Text, nullable=True)
    status = Column(Text, nullable=False, default=TRANSACTION_PENDING)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    fsa_account = relationship("FSAAccount", back_populates="transactions")
