"""SQLAlchemy metadata definitions for account, auth code and session tables."""

from __future__ import annotations

import sqlalchemy as sa

metadata = sa.MetaData()
sqlite_bigint = sa.BigInteger().with_variant(sa.Integer(), "sqlite")

users = sa.Table(
    "users",
    metadata,
    sa.Column("id", sqlite_bigint, primary_key=True, autoincrement=True),
    sa.Column("username", sa.Text(), nullable=False),
    sa.Column("password_hash", sa.Text(), nullable=False),
    sa.Column("is_banned", sa.Boolean(), nullable=False, server_default=sa.false()),
    sa.Column("iq", sa.Integer(), nullable=True),
    sa.Column("domain", sa.Text(), nullable=False),
    sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.text("CURRENT_TIMESTAMP"),
    ),
    sa.UniqueConstraint("username", name="uq_users_username"),
)

auth_codes = sa.Table(
    "auth_codes",
    metadata,
    sa.Column("id", sqlite_bigint, primary_key=True, autoincrement=True),
    sa.Column(
        "user_id",
        sqlite_bigint,
        sa.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    ),
    sa.Column("code", sa.Text(), nullable=False),
    sa.Column("ip_address", sa.Text(), nullable=True),
    sa.Column("user_agent", sa.Text(), nullable=True),
    sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.text("CURRENT_TIMESTAMP"),
    ),
    sa.UniqueConstraint("code", name="uq_auth_codes_code"),
)

sa.Index("ix_auth_codes_user_id", auth_codes.c.user_id)

qualifying_sessions = sa.Table(
    "qualifying_sessions",
    metadata,
    sa.Column("session_id", sa.Text(), primary_key=True, nullable=False),
    sa.Column("score", sa.Integer(), nullable=True),
    sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.text("CURRENT_TIMESTAMP"),
    ),
)
