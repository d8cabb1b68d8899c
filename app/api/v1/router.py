# app/api/v1/router.py
from fastapi import APIRouter

from app.api.v1.endpoints import health
from app.api.v1.endpoints import products as products_endpoints
from app.api.v1.endpoints import documents as documents_endpoints
from app.api.v1.endpoints import media as media_endpoints
from app.api.v1.endpoints import batch as batch_endpoints
from app.api.v1.endpoints import audit as audit_endpoints

api_router = APIRouter()
api_router.include_router(health.router, prefix="/health", tags=["health"])

# Admin core (JWT: viewer < editor < admin)
admin_router = APIRouter(prefix="/admin")
admin_router.include_router(products_endpoints.router)    # /products
admin_router.include_router(documents_endpoints.router)   # /products/{id}/docs, /homepage, /leaderboards, /collections
admin_router.include_router(media_endpoints.router)       # /media
admin_router.include_router(batch_endpoints.router)       # /batch
admin_router.include_router(audit_endpoints.router)       # /audit-logs

api_router.include_router(admin_router)
