"""SQLAlchemy ORM models for the SQL itinerary store."""

from datetime import date, datetime

from sqlalchemy import JSON, Boolean, Date, DateTime, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class TripRow(Base):
    """Trip table."""

    __tablename__ = "trip"
    __table_args__ = (Index("idx_trip_user", "user_id"),)

    # Surrogate key gives a stable insertion order for timestamp ties
    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(36), unique=True, nullable=False)
    user_id: Mapped[str] = mapped_column(String(128), nullable=False)
    destination: Mapped[str] = mapped_column(Text, nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    budget: Mapped[float] = mapped_column(Float, nullable=False)
    spent: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    lat: Mapped[float | None] = mapped_column(Float, nullable=True)
    lng: Mapped[float | None] = mapped_column(Float, nullable=True)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)


class ActivityRow(Base):
    """Activity table (main itinerary entries and shadow options)."""

    __tablename__ = "activity"
    __table_args__ = (Index("idx_activity_trip_order", "trip_id", "day", "order_index"),)

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(36), unique=True, nullable=False)
    trip_id: Mapped[str] = mapped_column(String(36), ForeignKey("trip.id"), nullable=False)
    day: Mapped[int] = mapped_column(Integer, nullable=False)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str] = mapped_column(String(32), nullable=False)
    time: Mapped[str] = mapped_column(String(32), nullable=False)
    duration: Mapped[str | None] = mapped_column(String(64), nullable=True)
    location: Mapped[str] = mapped_column(Text, nullable=False)
    cost: Mapped[float] = mapped_column(Float, nullable=False)
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    energy_level_requirement: Mapped[str] = mapped_column(String(8), nullable=False)
    is_shadow_option: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # Non-owning back-reference, no FK so a parent can be deleted independently
    parent_activity_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    lat: Mapped[float | None] = mapped_column(Float, nullable=True)
    lng: Mapped[float | None] = mapped_column(Float, nullable=True)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_keyword: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)


class BudgetItemRow(Base):
    """Budget item table."""

    __tablename__ = "budget_item"
    __table_args__ = (Index("idx_budget_trip_date", "trip_id", "date"),)

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(36), unique=True, nullable=False)
    trip_id: Mapped[str] = mapped_column(String(36), ForeignKey("trip.id"), nullable=False)
    category: Mapped[str] = mapped_column(String(64), nullable=False)
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    date: Mapped[date] = mapped_column(Date, nullable=False)
    source_activity_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)


class MoodReadingRow(Base):
    """Mood reading table (append-only)."""

    __tablename__ = "mood_reading"
    __table_args__ = (Index("idx_mood_trip", "trip_id"),)

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(36), unique=True, nullable=False)
    trip_id: Mapped[str] = mapped_column(String(36), ForeignKey("trip.id"), nullable=False)
    user_id: Mapped[str] = mapped_column(String(128), nullable=False)
    energy_level: Mapped[str] = mapped_column(String(8), nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime, nullable=False)


class PivotLogRow(Base):
    """Pivot log table (append-only)."""

    __tablename__ = "pivot_log"
    __table_args__ = (Index("idx_pivot_trip", "trip_id"),)

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(36), unique=True, nullable=False)
    trip_id: Mapped[str] = mapped_column(String(36), ForeignKey("trip.id"), nullable=False)
    previous_activity_id: Mapped[str] = mapped_column(String(36), nullable=False)
    new_activity_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    trigger: Mapped[str] = mapped_column(String(32), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)


class PreferencesRow(Base):
    """User preferences table, one row per user."""

    __tablename__ = "user_preferences"

    user_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    id: Mapped[str] = mapped_column(String(36), unique=True, nullable=False)
    budget: Mapped[str] = mapped_column(String(16), nullable=False)
    pace: Mapped[str] = mapped_column(String(16), nullable=False)
    interests: Mapped[list[str]] = mapped_column(JSON, nullable=False)
    dietary: Mapped[list[str]] = mapped_column(JSON, nullable=False)
    travel_style: Mapped[str] = mapped_column(String(16), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)


class ChatMessageRow(Base):
    """Chat message table."""

    __tablename__ = "chat_message"
    __table_args__ = (Index("idx_chat_user", "user_id"),)

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(36), unique=True, nullable=False)
    user_id: Mapped[str] = mapped_column(String(128), nullable=False)
    role: Mapped[str] = mapped_column(String(16), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    trip_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)


class DiscoveryRow(Base):
    """Discovery catalog table."""

    __tablename__ = "discovery"

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(36), unique=True, nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(32), nullable=False)
    location: Mapped[str] = mapped_column(Text, nullable=False)
    image_url: Mapped[str] = mapped_column(Text, nullable=False)
    rating: Mapped[float] = mapped_column(Float, nullable=False)
    sentiment: Mapped[str] = mapped_column(String(32), nullable=False)
    cost: Mapped[str] = mapped_column(String(16), nullable=False)
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
