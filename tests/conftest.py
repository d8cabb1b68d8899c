# tests/conftest.py
from __future__ import annotations

from typing import Callable, Dict

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from app.core.settings import settings
from app.db.base import Base
from app.db.session import get_db
import app.models  # noqa: F401  (registra los modelos en Base.metadata)
from app.utils.idempotency import idempotency_cache

# SQLite en memoria: una sola conexión compartida (StaticPool)
engine = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture(scope="function")
def db() -> Session:
    """
    Esquema nuevo por prueba; se destruye al terminar.
    """
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db: Session):
    """
    TestClient cuyos endpoints usan la MISMA sesión de la prueba.
    """
    from app.main import app  # import tardío para evitar ciclos

    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    idempotency_cache.clear()
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.pop(get_db, None)
        idempotency_cache.clear()


@pytest.fixture
def auth_headers() -> Callable[..., Dict[str, str]]:
    """
    auth_headers("editor") -> {"Authorization": "Bearer <jwt>"} con claims sub/role.
    """
    def _make(role: str = "editor", sub: str = "") -> Dict[str, str]:
        token = jwt.encode(
            {"sub": sub or f"{role}-1", "role": role},
            settings.JWT_SECRET_KEY,
            algorithm=settings.JWT_ALGORITHM,
        )
        return {"Authorization": f"Bearer {token}"}

    return _make


@pytest.fixture
def make_product(db: Session):
    """
    Crea un producto activo con slugs en ambos locales.
    """
    from app.schemas.catalog import ProductCreate
    from app.services.product_service import create_product

    def _make(canonical_id: str, zh: str | None = None, en: str | None = None, **extra):
        payload = ProductCreate(
            canonical_id=canonical_id,
            slug_by_locale={"zh-CN": zh or f"{canonical_id}-zh", "en": en or f"{canonical_id}-en"},
            **extra,
        )
        product = create_product(db, payload=payload, actor_id="tester")
        db.commit()
        return product

    return _make
