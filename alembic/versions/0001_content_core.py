"""content core: products, slugs, localized docs, media, redirects, audit

Revision ID: 0001_content_core
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "0001_content_core"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSONType = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def _enum(*values: str, name: str) -> sa.Enum:
    # native_enum=False: VARCHAR + CHECK (igual que en los modelos)
    return sa.Enum(*values, name=name, native_enum=False, create_constraint=True)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def _doc_columns() -> list[sa.Column]:
    return [
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("locale", sa.String(16), nullable=False),
        sa.Column("state", _enum("draft", "published", name="doc_state"), nullable=False),
        sa.Column("revision", sa.Integer(), nullable=False),
        sa.Column("content", JSONType, nullable=False),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_by", sa.String(160), nullable=True),
        sa.Column("updated_by", sa.String(160), nullable=True),
        *_timestamps(),
    ]


def upgrade() -> None:
    op.create_table(
        "products",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("canonical_id", sa.String(160), nullable=False),
        sa.Column("slug_by_locale", JSONType, nullable=False),
        sa.Column("type_taxonomy", JSONType, nullable=False),
        sa.Column("platforms", JSONType, nullable=False),
        sa.Column("store_links", JSONType, nullable=False),
        sa.Column("developer", sa.String(160), nullable=True),
        sa.Column("publisher", sa.String(160), nullable=True),
        sa.Column("brand", sa.String(160), nullable=True),
        sa.Column("status", _enum("active", "archived", name="product_status"), nullable=False),
        sa.Column("archived_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_products_canonical_id", "products", ["canonical_id"], unique=True)
    op.create_index("ix_products_status", "products", ["status"])

    op.create_table(
        "product_slugs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("product_id", sa.Integer(), sa.ForeignKey("products.id", ondelete="CASCADE"), nullable=False),
        sa.Column("locale", sa.String(16), nullable=False),
        sa.Column("slug", sa.String(200), nullable=False),
        sa.UniqueConstraint("locale", "slug", name="uq_product_slug_locale_slug"),
        sa.UniqueConstraint("product_id", "locale", name="uq_product_slug_product_locale"),
    )
    op.create_index("ix_product_slugs_product_id", "product_slugs", ["product_id"])

    op.create_table(
        "product_docs",
        *_doc_columns(),
        sa.Column("product_id", sa.Integer(), sa.ForeignKey("products.id", ondelete="CASCADE"), nullable=False),
        sa.Column("locked_fields", JSONType, nullable=False),
        sa.UniqueConstraint("product_id", "locale", "state", name="uq_product_doc_key"),
    )
    op.create_index("ix_product_docs_product_id", "product_docs", ["product_id"])

    op.create_table(
        "collection_docs",
        *_doc_columns(),
        sa.Column("collection_id", sa.String(160), nullable=False),
        sa.Column("slug_by_locale", JSONType, nullable=False),
        sa.UniqueConstraint("collection_id", "locale", "state", name="uq_collection_doc_key"),
    )
    op.create_index("ix_collection_docs_collection_id", "collection_docs", ["collection_id"])

    op.create_table(
        "leaderboard_docs",
        *_doc_columns(),
        sa.Column("board_id", sa.String(160), nullable=False),
        sa.Column("mode", sa.String(32), nullable=False),
        sa.UniqueConstraint("board_id", "locale", "state", name="uq_leaderboard_doc_key"),
    )
    op.create_index("ix_leaderboard_docs_board_id", "leaderboard_docs", ["board_id"])

    op.create_table(
        "homepage_configs",
        *_doc_columns(),
        sa.UniqueConstraint("locale", "state", name="uq_homepage_config_key"),
    )

    op.create_table(
        "media_assets",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "owner_type",
            _enum("product", "collection", "leaderboard", "homepage", name="media_owner_type"),
            nullable=False,
        ),
        sa.Column("owner_id", sa.String(160), nullable=False),
        sa.Column("locale", sa.String(16), nullable=True),
        sa.Column("type", _enum("image", "video", "presskit", "icon", "cover", name="media_type"), nullable=False),
        sa.Column("url", sa.String(1024), nullable=False),
        sa.Column("meta", JSONType, nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_media_assets_owner", "media_assets", ["owner_type", "owner_id"])

    op.create_table(
        "redirect_maps",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("locale", sa.String(16), nullable=False),
        sa.Column("from_path", sa.String(512), nullable=False),
        sa.Column("to_path", sa.String(512), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("locale", "from_path", name="uq_redirect_locale_from_path"),
    )
    op.create_index("ix_redirect_maps_locale_to_path", "redirect_maps", ["locale", "to_path"])

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.BigInteger().with_variant(sa.Integer(), "sqlite"), primary_key=True, autoincrement=True),
        sa.Column("actor_id", sa.String(160), nullable=True),
        sa.Column("action", sa.String(80), nullable=False),
        sa.Column("entity_type", sa.String(40), nullable=False),
        sa.Column("entity_id", sa.String(160), nullable=False),
        sa.Column("locale", sa.String(16), nullable=True),
        sa.Column("diff", JSONType, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_audit_logs_entity", "audit_logs", ["entity_type", "entity_id"])
    op.create_index("ix_audit_logs_action", "audit_logs", ["action"])


def downgrade() -> None:
    op.drop_table("audit_logs")
    op.drop_table("redirect_maps")
    op.drop_table("media_assets")
    op.drop_table("homepage_configs")
    op.drop_table("leaderboard_docs")
    op.drop_table("collection_docs")
    op.drop_table("product_docs")
    op.drop_table("product_slugs")
    op.drop_table("products")
