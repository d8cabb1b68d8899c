# app/services/slug_service.py
# Registro de slugs por locale, reclamación de archivados y mapa de redirects
from __future__ import annotations

import logging
from typing import Optional, Dict, Callable, List, Mapping

from sqlalchemy import select, delete
from sqlalchemy.orm import Session

from app.core.locales import path_to_locale
from app.models.catalog import Product, ProductSlug, MediaAsset, RedirectMap
from app.services.audit_service import snapshot, write_audit_log
from app.services.errors import SlugConflictError

log = logging.getLogger(__name__)

PathBuilder = Callable[[str, str], str]


# -------- Registro --------
def find_slug_owner(db: Session, *, locale: str, slug: str) -> Optional[Product]:
    return db.scalar(
        select(Product)
        .join(ProductSlug, ProductSlug.product_id == Product.id)
        .where(ProductSlug.locale == locale, ProductSlug.slug == slug)
    )


def purge_archived_product(db: Session, *, product: Product, actor_id: Optional[str]) -> None:
    """
    Hard-delete de un producto archivado que ocupa un slug reclamado:
    sus media, sus documentos y sus filas de slug desaparecen con él.
    Corre dentro de la transacción del caller (todo o nada).
    """
    before = snapshot(product)
    canonical_id = product.canonical_id

    db.execute(
        delete(MediaAsset).where(
            MediaAsset.owner_type == "product",
            MediaAsset.owner_id == canonical_id,
        )
    )
    db.delete(product)  # cascade ORM: slugs + docs
    db.flush()

    write_audit_log(
        db,
        actor_id=actor_id,
        action="product.archived.purge",
        entity_type="product",
        entity_id=canonical_id,
        before=before,
        after=None,
    )
    log.info("Purged archived product %s to reclaim its slugs", canonical_id)


def ensure_slug_available(
    db: Session,
    *,
    canonical_id: Optional[str],
    slug_by_locale: Mapping[str, str],
    actor_id: Optional[str],
) -> None:
    """
    Para cada (locale, slug):
    - dueño activo distinto   -> SlugConflictError
    - dueño archivado distinto -> se purga y el slug queda libre
    - mismo producto o libre   -> nada
    """
    for locale, slug in slug_by_locale.items():
        if not slug:
            continue
        owner = find_slug_owner(db, locale=locale, slug=slug)
        if owner is None or owner.canonical_id == canonical_id:
            continue
        if owner.status == "archived":
            purge_archived_product(db, product=owner, actor_id=actor_id)
            continue
        log.warning("Slug %s/%s is held by active product %s", locale, slug, owner.canonical_id)
        raise SlugConflictError(
            locale=locale,
            slug=slug,
            owner_id=owner.canonical_id,
            owner_status=owner.status,
        )


def sync_product_slugs(db: Session, *, product: Product) -> None:
    """
    Alinea las filas de product_slugs con product.slug_by_locale.
    """
    wanted: Dict[str, str] = {loc: s for loc, s in (product.slug_by_locale or {}).items() if s}
    current = {row.locale: row for row in product.slugs}

    for locale, row in current.items():
        if locale not in wanted:
            product.slugs.remove(row)
    for locale, slug in wanted.items():
        row = current.get(locale)
        if row is None:
            product.slugs.append(ProductSlug(locale=locale, slug=slug))
        elif row.slug != slug:
            row.slug = slug
    db.flush()


# -------- Redirects --------
def build_slug_redirects(
    old_slug_by_locale: Mapping[str, str] | None,
    new_slug_by_locale: Mapping[str, str] | None,
    path_builder: PathBuilder,
) -> List[Dict[str, str]]:
    """
    Un redirect por locale donde el slug cambió (ambos no vacíos).
    """
    old = dict(old_slug_by_locale or {})
    new = dict(new_slug_by_locale or {})
    out: List[Dict[str, str]] = []
    for locale in sorted(set(old) | set(new)):
        before, after = old.get(locale), new.get(locale)
        if before and after and before != after:
            out.append({
                "locale": locale,
                "from_path": path_builder(locale, before),
                "to_path": path_builder(locale, after),
            })
    return out


def upsert_redirect(db: Session, *, locale: str, from_path: str, to_path: str) -> RedirectMap:
    """
    (locale, from_path) -> to_path, apuntando siempre a la ruta vigente:
    - filas que apuntaban a from_path se reescriben a to_path (sin cadenas)
    - si to_path era una ruta antigua, su fila queda auto-referenciada (inactiva)
    Nunca borra filas.
    """
    stale = db.scalars(
        select(RedirectMap).where(
            RedirectMap.locale == locale,
            RedirectMap.to_path == from_path,
            RedirectMap.from_path != from_path,
        )
    ).all()
    for row in stale:
        row.to_path = to_path

    revived = db.scalar(
        select(RedirectMap).where(RedirectMap.locale == locale, RedirectMap.from_path == to_path)
    )
    if revived is not None:
        revived.to_path = revived.from_path

    row = db.scalar(
        select(RedirectMap).where(RedirectMap.locale == locale, RedirectMap.from_path == from_path)
    )
    if row is None:
        row = RedirectMap(locale=locale, from_path=from_path, to_path=to_path)
        db.add(row)
    else:
        row.to_path = to_path
    db.flush()
    log.info("Redirect %s: %s -> %s", locale, from_path, to_path)
    return row


def apply_slug_redirects(
    db: Session,
    *,
    old_slug_by_locale: Mapping[str, str] | None,
    new_slug_by_locale: Mapping[str, str] | None,
    path_builder: PathBuilder,
) -> List[RedirectMap]:
    return [
        upsert_redirect(db, **r)
        for r in build_slug_redirects(old_slug_by_locale, new_slug_by_locale, path_builder)
    ]


def resolve_redirect(db: Session, *, path: str, locale: Optional[str] = None) -> Dict[str, object]:
    """
    Busca un redirect activo para `path`. Sin locale explícito, se infiere
    del primer segmento de la ruta.
    """
    if not locale:
        segment = path.strip("/").split("/", 1)[0]
        locale = path_to_locale(segment)
    row = db.scalar(
        select(RedirectMap).where(RedirectMap.locale == locale, RedirectMap.from_path == path)
    )
    if row is None or row.to_path == row.from_path:
        return {"found": False, "status_code": None, "to_path": None}
    return {"found": True, "status_code": 301, "to_path": row.to_path}
