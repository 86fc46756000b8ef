"""Initial schema – users, providers, servers, user_settings, audit_logs

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-17

Secret columns (servers.password / ssh_password / provider_password,
providers.password and the secret keys inside user_settings.document) hold
the value as entered; "" and NULL both mean "no secret".
"""

from alembic import op
import sqlalchemy as sa

# Alembic revision identifiers
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    # -- users ----------------------------------------------------------
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(64), nullable=False, unique=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("idx_users_username", "users", ["username"])

    # -- providers ------------------------------------------------------
    op.create_table(
        "providers",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("login_url", sa.String(2048), nullable=False, server_default=""),
        sa.Column("username", sa.String(255), nullable=False, server_default=""),
        sa.Column("password", sa.Text(), nullable=True),
        sa.Column("categories", sa.String(64), nullable=False, server_default=""),
        sa.Column("payment_method", sa.String(32), nullable=False, server_default="Other"),
        sa.Column("payment_account", sa.String(255), nullable=False, server_default=""),
        sa.Column("sort_order", sa.Integer(), nullable=True),
        *_timestamps(),
    )
    op.create_index("idx_providers_user_id", "providers", ["user_id"])

    # -- servers --------------------------------------------------------
    op.create_table(
        "servers",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("ip", sa.String(64), nullable=False, server_default=""),
        sa.Column("provider", sa.String(255), nullable=False, server_default=""),
        sa.Column("provider_id", sa.Integer(), sa.ForeignKey("providers.id", ondelete="SET NULL"), nullable=True),
        sa.Column("region", sa.String(128), nullable=False, server_default=""),
        sa.Column("os", sa.String(128), nullable=False, server_default=""),
        sa.Column("status", sa.String(16), nullable=False, server_default="running"),
        sa.Column("expiration_date", sa.String(32), nullable=False, server_default=""),
        sa.Column("panel_url", sa.String(2048), nullable=True),
        sa.Column("username", sa.String(255), nullable=True),
        sa.Column("password", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("provider_url", sa.String(2048), nullable=True),
        sa.Column("provider_username", sa.String(255), nullable=True),
        sa.Column("provider_password", sa.Text(), nullable=True),
        sa.Column("ssh_port", sa.Integer(), nullable=True),
        sa.Column("ssh_username", sa.String(255), nullable=True),
        sa.Column("ssh_password", sa.Text(), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=True),
        *_timestamps(),
    )
    op.create_index("idx_servers_user_id", "servers", ["user_id"])

    # -- user_settings --------------------------------------------------
    op.create_table(
        "user_settings",
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("schema_version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("document", sa.Text(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # -- audit_logs -----------------------------------------------------
    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("action", sa.String(64), nullable=False),
        sa.Column("detail", sa.Text(), nullable=True),
        sa.Column("request_ip", sa.String(45), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("idx_audit_logs_user_id", "audit_logs", ["user_id"])
    op.create_index("idx_audit_logs_action", "audit_logs", ["action"])


def downgrade() -> None:
    op.drop_index("idx_audit_logs_action", table_name="audit_logs")
    op.drop_index("idx_audit_logs_user_id", table_name="audit_logs")
    op.drop_table("audit_logs")
    op.drop_table("user_settings")
    op.drop_index("idx_servers_user_id", table_name="servers")
    op.drop_table("servers")
    op.drop_index("idx_providers_user_id", table_name="providers")
    op.drop_table("providers")
    op.drop_index("idx_users_username", table_name="users")
    op.drop_table("users")
