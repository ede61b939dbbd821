import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from search_intent.api.router import router as api_router_v1
from search_intent.config import settings
from search_intent.models.schemas import FailureResult
from search_intent.service.websocket import router as websocket_router_v1
from search_intent.utils.loader import get_keywords_loader
from search_intent.utils.session_store import close_session_store

logger = logging.getLogger(settings.SERVICE_NAME + ".main")

API_TITLE = "Phayao Hub - Search Intent Service"
API_VERSION_MAIN = "0.1.0"
API_DESCRIPTION = (
    "Routes free-text searches to the jobs, market, guide or community section, "
    "serves typing suggestions and keeps per-visitor search preferences."
)

INTERNAL_ERROR_MESSAGE = "เกิดข้อผิดพลาดภายในเซิร์ฟเวอร์"


def _failure(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=FailureResult(error=message).model_dump())


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.detail}")
    return _failure(exc.status_code, str(exc.detail))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
    )
    logger.info(f"Rejected {request.method} {request.url.path}: {message}")
    return _failure(status.HTTP_422_UNPROCESSABLE_ENTITY, message)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return _failure(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE)


def create_app() -> FastAPI:
    """
    Factory function to create and configure the FastAPI application for the search intent service.
    """
    app = FastAPI(
        title=API_TITLE,
        version=API_VERSION_MAIN,
        description=API_DESCRIPTION,
        openapi_url=f"/{settings.API_VERSION}/openapi.json",
        docs_url=f"/{settings.API_VERSION}/docs",
        redoc_url=f"/{settings.API_VERSION}/redoc",
        default_response_class=JSONResponse,
    )

    # --- CORS Middleware ---
    if settings.CORS_ALLOWED_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.CORS_ALLOWED_ORIGINS,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
        logger.info(f"CORS middleware enabled for origins: {settings.CORS_ALLOWED_ORIGINS}")

    # --- Error envelopes ---
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # --- Event Handlers ---
    @app.on_event("startup")
    async def startup_event():
        logger.info(f"Starting {API_TITLE} v{API_VERSION_MAIN}...")
        loader = get_keywords_loader()
        if not loader.get_rules():
            logger.critical("Keywords not loaded during startup. All searches will fall back to the market.")
        logger.info(f"Session backend: {settings.SESSION_BACKEND}")

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info(f"Shutting down {API_TITLE}...")
        await close_session_store()

    # --- Include Routers ---
    app.include_router(api_router_v1)
    app.include_router(websocket_router_v1, tags=["Search Box WebSocket"])

    logger.info(f"Access Swagger UI at '/{settings.API_VERSION}/docs'.")
    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    logger.info("Running Uvicorn directly for search intent development...")
    uvicorn.run(
        "search_intent.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        log_level=settings.LOG_LEVEL.lower(),
        reload=True,
    )
