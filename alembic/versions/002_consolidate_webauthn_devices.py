"""Consolidate legacy WebAuthn tables into webauthn_devices

Revision ID: 002_consolidate_webauthn_devices
Revises: 001_legacy_webauthn_tables
Create Date: 2024-05-13 00:00:00.000000

Only credentials flagged ``legacy`` are carried over, column for column.
Both legacy tables are dropped afterwards, so this revision cannot run
twice and its downgrade only recreates empty legacy tables.
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "002_consolidate_webauthn_devices"
down_revision: Union[str, None] = "001_legacy_webauthn_tables"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

COPIED_COLUMNS = (
    "created_at",
    "last_used_at",
    "rpid",
    "username",
    "description",
    "kid",
    "public_key",
    "attestation_type",
    "transport",
    "aaguid",
    "sign_count",
    "clone_warning",
)


def upgrade() -> None:
    op.create_table(
        "webauthn_devices",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_used_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rpid", sa.Text(), nullable=False, server_default=""),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("description", sa.String(30), nullable=False, server_default="Primary"),
        sa.Column("kid", sa.String(512), nullable=False),
        sa.Column("aaguid", sa.String(36), nullable=True),
        sa.Column("attestation_type", sa.String(32), nullable=False, server_default=""),
        sa.Column("attachment", sa.String(64), nullable=False, server_default=""),
        sa.Column("transport", sa.String(64), nullable=False, server_default=""),
        sa.Column("sign_count", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("clone_warning", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("discoverable", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("present", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("backup_eligible", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("backup_state", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("public_key", sa.LargeBinary(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("webauthn_devices_kid_key", "webauthn_devices", ["kid"], unique=True)
    op.create_index(
        "webauthn_devices_lookup_key",
        "webauthn_devices",
        ["username", "description"],
        unique=True,
    )

    credentials = sa.table(
        "webauthn_credentials",
        *(sa.column(name) for name in COPIED_COLUMNS),
        sa.column("legacy", sa.Boolean),
    )
    devices = sa.table("webauthn_devices", *(sa.column(name) for name in COPIED_COLUMNS))
    op.execute(
        devices.insert().from_select(
            list(COPIED_COLUMNS),
            sa.select(*(credentials.c[name] for name in COPIED_COLUMNS)).where(
                credentials.c.legacy == sa.true()
            ),
        )
    )

    op.drop_table("webauthn_credentials")
    op.drop_table("webauthn_users")


def downgrade() -> None:
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

    op.drop_index("webauthn_devices_lookup_key", table_name="webauthn_devices")
    op.drop_index("webauthn_devices_kid_key", table_name="webauthn_devices")
    op.drop_table("webauthn_devices")
