import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.services.errors import ContentError
from .settings import settings

log = logging.getLogger(__name__)

# kind -> status HTTP
ERROR_STATUS = {
    "not_found": 404,
    "authorization": 403,
    "conflict": 409,
    "stale_write": 409,
    "validation": 400,
    "invariant": 400,
}


async def content_error_handler(request: Request, exc: ContentError) -> JSONResponse:
    status_code = ERROR_STATUS.get(exc.kind, 400)
    if status_code == 403:
        log.warning("Policy violation on %s %s: %s", request.method, request.url.path, exc.code)
    return JSONResponse(status_code=status_code, content={"detail": exc.to_dict()})


def create_app() -> FastAPI:
    app = FastAPI(title=settings.APP_NAME)

    if settings.BACKEND_CORS_ORIGINS:
        origins = [str(o) for o in settings.BACKEND_CORS_ORIGINS]
        allow_credentials = True
        if "*" in origins:
            origins = ["*"]
            allow_credentials = False
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=allow_credentials,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.add_exception_handler(ContentError, content_error_handler)
    return app
