from __future__ import annotations

from fastapi.openapi.utils import get_openapi
from fastapi.routing import APIRoute

from app.api.delivery.router import router as delivery_router
from app.api.v1.router import api_router
from app.core.config import create_app
from app.core.logging import configure_logging
from app.core.settings import settings

from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware


app = create_app()
configure_logging()

app.add_middleware(ProxyHeadersMiddleware, trusted_hosts="*")

PUBLIC_PREFIX = f"{settings.API_V1_STR}/public/"


def _inject_bearer_security(app):
    """
    Inyecta bearerAuth globalmente en OpenAPI. Luego “blanqueamos” las rutas
    públicas para que queden sin candado en la documentación.
    """
    def custom_openapi():
        if app.openapi_schema:
            return app.openapi_schema

        openapi_schema = get_openapi(
            title=settings.APP_NAME,
            version="1.0.0",
            description="API del core de contenidos",
            routes=app.routes,
        )

        components = openapi_schema.setdefault("components", {})
        security_schemes = components.setdefault("securitySchemes", {})
        security_schemes["bearerAuth"] = {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT",
        }
        openapi_schema["security"] = [{"bearerAuth": []}]

        app.openapi_schema = openapi_schema
        return app.openapi_schema

    app.openapi = custom_openapi


def _mark_public_routes(app):
    """
    Marca rutas públicas (delivery + health) como tales en Swagger.
    Solo documentación; la seguridad real es la de los endpoints.
    """
    for route in app.routes:
        if isinstance(route, APIRoute):
            path = route.path or ""
            if path.startswith(PUBLIC_PREFIX) or path.startswith(f"{settings.API_V1_STR}/health/"):
                extra = dict(route.openapi_extra or {})
                extra["security"] = []
                route.openapi_extra = extra


_inject_bearer_security(app)

# API privada (JWT)
app.include_router(api_router, prefix=settings.API_V1_STR)

# Delivery pública
app.include_router(delivery_router)

_mark_public_routes(app)
