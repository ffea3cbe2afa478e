"""Legacy WebAuthn user and credential tables

Revision ID: 001_legacy_webauthn_tables
Revises:
Create Date: 2024-03-04 00:00:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "001_legacy_webauthn_tables"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "webauthn_users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("rpid", sa.Text(), nullable=False),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("userid", sa.String(64), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("rpid", "username", name="webauthn_users_lookup_key"),
    )

    op.create_table(
        "webauthn_credentials",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_used_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rpid", sa.Text(), nullable=False, server_default=""),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("description", sa.String(30), nullable=False, server_default="Primary"),
        sa.Column("kid", sa.String(512), nullable=False),
        sa.Column("public_key", sa.LargeBinary(), nullable=False),
        sa.Column("attestation_type", sa.String(32), nullable=False, server_default=""),
        sa.Column("transport", sa.String(64), nullable=False, server_default=""),
        sa.Column("aaguid", sa.String(36), nullable=False),
        sa.Column("sign_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("clone_warning", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("legacy", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("webauthn_credentials_kid_key", "webauthn_credentials", ["kid"], unique=True)
    op.create_index(
        "webauthn_credentials_lookup_key",
        "webauthn_credentials",
        ["rpid", "username", "description"],
        unique=True,
    )


def downgrade() -> None:
    op.drop_index("webauthn_credentials_lookup_key", table_name="webauthn_credentials")
    op.drop_index("webauthn_credentials_kid_key", table_name="webauthn_credentials")
    op.drop_table("webauthn_credentials")
    op.drop_table("webauthn_users")
