"""SQLAlchemy table definitions mirroring the hosted backend's schema"""

import uuid

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


def _uuid() -> str:
    return str(uuid.uuid4())


class BranchRow(Base):
    """Branch office"""

    __tablename__ = "branches"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(Text, nullable=False)
    location = Column(Text, nullable=False, default="")
    address = Column(Text, nullable=False, default="")
    phone = Column(Text, nullable=False, default="")
    email = Column(Text, nullable=True)
    manager_name = Column(Text, nullable=False, default="")
    manager_id = Column(Text, nullable=False, default="")
    status = Column(Text, nullable=False, default="ACTIVE")
    opening_date = Column(Date, nullable=True)
    employee_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class ClientRow(Base):
    """Microfinance client"""

    __tablename__ = "clients"

    id = Column(String(36), primary_key=True, default=_uuid)
    first_name = Column(Text, nullable=False)
    last_name = Column(Text, nullable=False)
    email = Column(Text, nullable=True)
    phone = Column(Text, nullable=False, default="")
    address = Column(Text, nullable=False, default="")
    national_id = Column(Text, nullable=False, default="")
    date_of_birth = Column(Date, nullable=True)
    gender = Column(Text, nullable=False, default="other")
    occupation = Column(Text, nullable=False, default="")
    income_source = Column(Text, nullable=False, default="")
    monthly_income = Column(Numeric(14, 2, asdecimal=False), nullable=False, default=0)
    branch_id = Column(String(36), ForeignKey("branches.id"), nullable=True, index=True)
    status = Column(Text, nullable=False, default="PENDING", index=True)
    photo = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class LoanRow(Base):
    """Loan with lifecycle timestamps"""

    __tablename__ = "loans"

    id = Column(String(36), primary_key=True, default=_uuid)
    client_id = Column(String(36), ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True)
    branch_id = Column(String(36), ForeignKey("branches.id"), nullable=True)
    product_id = Column(String(36), nullable=True)
    amount = Column(Numeric(14, 2, asdecimal=False), nullable=False)
    interest_rate = Column(Numeric(6, 2, asdecimal=False), nullable=False, default=0)
    term = Column(Integer, nullable=False, default=1)
    purpose = Column(Text, nullable=False, default="")
    status = Column(Text, nullable=False, default="PENDING", index=True)
    approved_by = Column(Text, nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    disbursed_at = Column(DateTime(timezone=True), nullable=True, index=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class LoanRepaymentRow(Base):
    """Scheduled installment of a loan"""

    __tablename__ = "loan_repayments"

    id = Column(String(36), primary_key=True, default=_uuid)
    loan_id = Column(String(36), ForeignKey("loans.id", ondelete="CASCADE"), nullable=False, index=True)
    amount = Column(Numeric(14, 2, asdecimal=False), nullable=False)
    due_date = Column(Date, nullable=False, index=True)
    paid_date = Column(DateTime(timezone=True), nullable=True)
    is_paid = Column(Boolean, nullable=False, default=False)
    payment_method = Column(Text, nullable=True)
    transaction_id = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class OrganizationSettingsRow(Base):
    """Single-row organization profile used on printed reports"""

    __tablename__ = "organization_settings"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(Text, nullable=False)
    logo = Column(Text, nullable=True)
