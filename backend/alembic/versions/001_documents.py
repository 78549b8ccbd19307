"""Document store table - one JSON document per (collection, id)

Revision ID: 001_documents
Revises: None
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "001_documents"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "documents",
        sa.Column("collection", sa.String(50), primary_key=True),
        sa.Column("id", sa.String(100), primary_key=True),
        sa.Column("data", postgresql.JSONB, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    # categories are looked up by parent, products by category
    op.create_index(
        "ix_documents_parent_id",
        "documents",
        [sa.text("(data->>'parentId')")],
        postgresql_where=sa.text("collection = 'categories'"),
    )
    op.create_index(
        "ix_documents_product_category",
        "documents",
        [sa.text("(data->>'category')")],
        postgresql_where=sa.text("collection = 'products'"),
    )


def downgrade() -> None:
    op.drop_index("ix_documents_product_category", table_name="documents")
    op.drop_index("ix_documents_parent_id", table_name="documents")
    op.drop_table("documents")
