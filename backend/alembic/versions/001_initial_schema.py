"""Initial schema — users, events, admins, registrations, credentials, attendance, sign-in codes.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("identity_commitment", sa.String(256), nullable=False, server_default=""),
        sa.Column("encrypted_identity_secret", sa.Text, nullable=False, server_default=""),
        sa.Column("encrypted_internal_nullifier", sa.Text, nullable=False, server_default=""),
        sa.Column("is_encrypted", sa.Boolean, nullable=False, server_default="true"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_identity_commitment", "users", ["identity_commitment"])

    op.create_table(
        "events",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=False, server_default=""),
        sa.Column("url", sa.String(2048), nullable=False, server_default=""),
        sa.Column("admin_code", sa.String(255), nullable=False, server_default=""),
        sa.Column("chain_id", sa.String(32), nullable=False, server_default="1"),
        sa.Column("context_id", sa.String(80), nullable=False, server_default=""),
        sa.Column("context_string", sa.Text, nullable=False, server_default=""),
        sa.Column("issuer_key_id", sa.String(66), nullable=False, server_default=""),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "event_admins",
        sa.Column("event_id", sa.String(36), sa.ForeignKey("events.id"), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id"), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "registrations",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("event_id", sa.String(36), sa.ForeignKey("events.id"), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("event_id", "email", name="uq_registrations_event_email"),
    )

    op.create_table(
        "ticket_credentials",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("event_id", sa.String(36), sa.ForeignKey("events.id"), nullable=False),
        sa.Column("data", sa.Text, nullable=False),
        sa.Column("issued_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expire_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("event_id", "email", name="uq_ticket_credentials_event_email"),
    )
    op.create_index("ix_ticket_credentials_email", "ticket_credentials", ["email"])

    op.create_table(
        "email_credentials",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("identity_commitment", sa.String(256), nullable=False, unique=True),
        sa.Column("data", sa.Text, nullable=False),
        sa.Column("issued_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expire_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "attendances",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("event_id", sa.String(36), sa.ForeignKey("events.id"), nullable=False),
        sa.Column("nullifier", sa.String(256), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("event_id", "nullifier", name="uq_attendances_event_nullifier"),
    )

    op.create_table(
        "signin_codes",
        sa.Column("key", sa.String(400), primary_key=True),
        sa.Column("value", sa.String(64), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_signin_codes_expires_at", "signin_codes", ["expires_at"])


def downgrade() -> None:
    op.drop_index("ix_signin_codes_expires_at", "signin_codes")
    op.drop_table("signin_codes")
    op.drop_table("attendances")
    op.drop_table("email_credentials")
    op.drop_index("ix_ticket_credentials_email", "ticket_credentials")
    op.drop_table("ticket_credentials")
    op.drop_table("registrations")
    op.drop_table("event_admins")
    op.drop_table("events")
    op.drop_index("ix_users_identity_commitment", "users")
    op.drop_index("ix_users_email", "users")
    op.drop_table("users")
