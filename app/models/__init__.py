# Importa todos los modelos para poblar Base.metadata (Alembic / tests)
from app.models.catalog import Product, ProductSlug, MediaAsset, RedirectMap
from app.models.documents import ProductDoc, CollectionDoc, LeaderboardDoc, HomepageConfig
from app.models.audit import AuditLog

__all__ = [
    "Product",
    "ProductSlug",
    "MediaAsset",
    "RedirectMap",
    "ProductDoc",
    "CollectionDoc",
    "LeaderboardDoc",
    "HomepageConfig",
    "AuditLog",
]
