"""SQLAlchemy ORM models for the record store collections"""

import uuid
from sqlalchemy import Column, String, Boolean, Float, DateTime, Date, Integer, Text, UniqueConstraint
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


class MonthlyBudget(Base):
    """Total budget for one user and calendar month"""

    __tablename__ = "monthly_budget"
    __table_args__ = (UniqueConstraint("user_id", "year", "month", name="uq_budget_user_month"),)

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(Text, nullable=False, index=True)
    year = Column(Integer, nullable=False)
    month = Column(Integer, nullable=False)
    total_budget = Column(Float, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Category(Base):
    """Spending category with a fixed or percentage allocation"""

    __tablename__ = "category"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(Text, nullable=False, index=True)
    name = Column(Text, nullable=False)
    type = Column(Text, nullable=False, default="percentage")  # fixed | percentage
    fixed_amount = Column(Float, nullable=True)
    percentage = Column(Float, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Expense(Base):
    """Manually entered expense"""

    __tablename__ = "expense"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(Text, nullable=False, index=True)
    description = Column(Text, nullable=True)
    amount = Column(Float, nullable=False)
    date = Column(Date, nullable=False, index=True)
    category_id = Column(String(36), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class BankTransaction(Base):
    """Transaction imported from a linked bank account"""

    __tablename__ = "bank_transaction"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(Text, nullable=False, index=True)
    transaction_id = Column(Text, nullable=True)
    description = Column(Text, nullable=True)
    merchant_name = Column(Text, nullable=True)
    amount = Column(Float, nullable=False)
    booking_date = Column(Date, nullable=False, index=True)
    transaction_type = Column(Text, nullable=False, default="expense")  # expense | income | transfer
    category_id = Column(String(36), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class UserStreak(Base):
    """No-spend streak state, one row per user"""

    __tablename__ = "user_streak"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(Text, nullable=False, unique=True)
    current_streak = Column(Integer, nullable=False, default=0)
    best_streak = Column(Integer, nullable=False, default=0)
    last_no_spend_date = Column(Date, nullable=True)
    streak_broken_count = Column(Integer, nullable=False, default=0)
    total_no_spend_days = Column(Integer, nullable=False, default=0)
    last_check_in_date = Column(Date, nullable=True)


class WeeklyMission(Base):
    """Weekly spend-reduction challenge with its frozen baseline"""

    __tablename__ = "weekly_mission"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(Text, nullable=False, index=True)
    mission_type = Column(Text, nullable=False)
    category_name = Column(Text, nullable=False)
    target_percentage = Column(Integer, nullable=False, default=10)
    week_start = Column(Date, nullable=False)
    week_end = Column(Date, nullable=False)
    status = Column(Text, nullable=False, default="active")  # active | completed | failed
    baseline_amount = Column(Float, nullable=False)
    baseline_source = Column(Text, nullable=False)
    current_week_amount = Column(Float, nullable=False, default=0.0)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class SmartAlert(Base):
    """Generated financial alert; dismissal is a soft delete"""

    __tablename__ = "smart_alert"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(Text, nullable=False, index=True)
    alert_type = Column(Text, nullable=False)
    title = Column(Text, nullable=False)
    message = Column(Text, nullable=False, default="")
    severity = Column(Text, nullable=False)
    category_name = Column(Text, nullable=True)
    amount_involved = Column(Float, nullable=True)
    recommended_action = Column(Text, nullable=False, default="")
    low_confidence = Column(Boolean, nullable=False, default=False)
    is_dismissed = Column(Boolean, nullable=False, default=False, index=True)
    source = Column(Text, nullable=True)  # model | fallback
    generated_at = Column(DateTime(timezone=True), nullable=False)


COLLECTIONS = {
    model.__tablename__: model
    for model in (MonthlyBudget, Category, Expense, BankTransaction, UserStreak, WeeklyMission, SmartAlert)
}
