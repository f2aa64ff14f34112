"""create recoveries table

Revision ID: 8b4e2f6a1c93
Revises: 3f1a9c2d7e40
Create Date: 2026-10-12 09:10:00.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "8b4e2f6a1c93"
down_revision = "3f1a9c2d7e40"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "recoveries",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("payment_intent_id", sa.String(length=255), nullable=False),
        sa.Column("original_payment_intent_id", sa.String(length=255), nullable=True),
        sa.Column("customer_id", sa.String(length=255), nullable=False),
        sa.Column("customer_email", sa.String(length=255), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False),
        sa.Column("payment_method_id", sa.String(length=255), nullable=False),
        sa.Column("payment_method_brand", sa.String(length=50), nullable=True),
        sa.Column("payment_method_last4", sa.String(length=4), nullable=True),
        sa.Column("recovered_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("original_failed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=True,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "user_id", "payment_intent_id", name="uq_recoveries_user_payment_intent"
        ),
    )
    op.create_index(op.f("ix_recoveries_user_id"), "recoveries", ["user_id"])
    op.create_index(
        op.f("ix_recoveries_payment_intent_id"), "recoveries", ["payment_intent_id"]
    )
    op.create_index(
        op.f("ix_recoveries_original_payment_intent_id"),
        "recoveries",
        ["original_payment_intent_id"],
    )
    op.create_index(
        "ix_recoveries_user_recovered_at", "recoveries", ["user_id", "recovered_at"]
    )


def downgrade() -> None:
    op.drop_index("ix_recoveries_user_recovered_at", table_name="recoveries")
    op.drop_index(op.f("ix_recoveries_original_payment_intent_id"), table_name="recoveries")
    op.drop_index(op.f("ix_recoveries_payment_intent_id"), table_name="recoveries")
    op.drop_index(op.f("ix_recoveries_user_id"), table_name="recoveries")
    op.drop_table("recoveries")
