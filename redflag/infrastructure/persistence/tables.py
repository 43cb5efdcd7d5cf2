"""SQLAlchemy table definitions - dialect-agnostic (works with SQLite and PostgreSQL)."""

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.types import JSON

# Metadata object for all tables
metadata = MetaData()

# ============================================================================
# USERS TABLE
# ============================================================================
users_table = Table(
    "users",
    metadata,
    Column("id", String, primary_key=True),
    Column("email", String(64), nullable=False, unique=True),  # guest-<digits> for guests
    Column("password_hash", String(255), nullable=True),
    Column("email_verified", DateTime(timezone=True), nullable=True),
    Column("name", Text, nullable=True),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
)


# ============================================================================
# CONVERSATIONS TABLE
# ============================================================================
conversations_table = Table(
    "conversations",
    metadata,
    Column("id", String, primary_key=True),
    Column("user_id", String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
    Column("title", Text, nullable=False),
    Column("category", String(32), nullable=True),
    Column("red_flag_score", Float, nullable=True),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
    Column("deleted_at", DateTime(timezone=True), nullable=True),  # Soft delete
)

Index("idx_conversations_user_id", conversations_table.c.user_id)
Index("idx_conversations_created_at", conversations_table.c.created_at)


# ============================================================================
# MESSAGES TABLE
# ============================================================================
messages_table = Table(
    "messages",
    metadata,
    Column("id", String, primary_key=True),
    Column(
        "conversation_id",
        String,
        ForeignKey("conversations.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("role", String(16), nullable=False),
    Column("content", Text, nullable=False),
    Column("red_flag_data", JSON, nullable=True),  # Structured analysis results
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("deleted_at", DateTime(timezone=True), nullable=True),  # Soft delete
)

Index("idx_messages_conversation_id", messages_table.c.conversation_id)


# ============================================================================
# UPLOADED FILES TABLE
# ============================================================================
uploaded_files_table = Table(
    "uploaded_files",
    metadata,
    Column("id", String, primary_key=True),
    Column(
        "conversation_id",
        String,
        ForeignKey("conversations.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("storage_url", Text, nullable=False),
    Column("storage_id", Text, nullable=False),
    Column("file_type", String(64), nullable=False),
    Column("file_size", Integer, nullable=True),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("auto_delete_at", DateTime(timezone=True), nullable=False),
    Column("deleted_at", DateTime(timezone=True), nullable=True),  # Soft delete
)

# Sweep query: expired and not yet deleted
Index(
    "idx_uploaded_files_auto_delete",
    uploaded_files_table.c.auto_delete_at,
    postgresql_where=text("deleted_at IS NULL"),
)


# ============================================================================
# USAGE LOGS TABLE (rate limiting)
# ============================================================================
usage_logs_table = Table(
    "usage_logs",
    metadata,
    Column("id", String, primary_key=True),
    Column("user_id", String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
    Column("date", Date, nullable=False),
    Column("analysis_count", Integer, nullable=False, server_default=text("1")),
    Column("created_at", DateTime(timezone=True), nullable=False),
    # Upsert target: one row per user per calendar day
    UniqueConstraint("user_id", "date", name="uq_usage_logs_user_date"),
)
