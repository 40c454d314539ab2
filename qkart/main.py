from fastapi import FastAPI, APIRouter, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from datetime import datetime
import uvicorn

from shared.utils import get_db_client, settings, ErrorResponse, HealthResponse
from shared.logging_config import setup_logging, RequestLoggingMiddleware
from shared.security_config import setup_rate_limiting, SecurityHeadersMiddleware

from qkart.routes import auth, users, products, cart

# Setup Logging
logger = setup_logging(settings.SERVICE_NAME)


def error_response(status_code: int, message: str, details=None, headers=None) -> JSONResponse:
    body = ErrorResponse(code=status_code, error=message, details=details)
    return JSONResponse(status_code=status_code, content=body.dict(exclude_none=True), headers=headers)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail
    if exc.status_code == status.HTTP_404_NOT_FOUND and message == "Not Found":
        message = "Not found"
    return error_response(exc.status_code, message, headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    messages = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err["loc"] if part not in ("body", "path", "query"))
        messages.append(f"{field}: {err['msg']}" if field else err["msg"])
    return error_response(status.HTTP_400_BAD_REQUEST, "; ".join(messages))


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled error", exc_info=exc)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error")


def create_app() -> FastAPI:
    app = FastAPI(title="QKart Backend")

    # Security Setup
    setup_rate_limiting(app)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestLoggingMiddleware, service_name=settings.SERVICE_NAME)

    # CORS Configuration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    v1 = APIRouter(prefix="/v1")
    v1.include_router(auth.router, prefix="/auth", tags=["auth"])
    v1.include_router(users.router, prefix="/users", tags=["users"])
    v1.include_router(products.router, prefix="/products", tags=["products"])
    v1.include_router(cart.router, prefix="/cart", tags=["cart"])
    app.include_router(v1)

    @app.on_event("startup")
    async def startup_db_client():
        app.mongodb_client = get_db_client()
        app.mongodb = app.mongodb_client[settings.MONGO_DB_NAME]
        # One account per email, one cart per account
        await app.mongodb.users.create_index("email", unique=True)
        await app.mongodb.carts.create_index("email", unique=True)
        logger.info(f"Connected to DB {settings.MONGO_DB_NAME}")

    @app.on_event("shutdown")
    async def shutdown_db_client():
        app.mongodb_client.close()

    @app.get("/health", response_model=HealthResponse)
    async def health_check():
        try:
            await app.mongodb.command("ping")
            db_status = "connected"
        except Exception:
            db_status = "disconnected"

        if db_status != "connected":
            logger.error(f"Health Check Failed: DB={db_status}")
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Service Unhealthy"
            )

        return HealthResponse(
            service=settings.SERVICE_NAME,
            status="healthy",
            timestamp=datetime.utcnow(),
            version="1.0.0",
            database=db_status
        )

    return app


app = create_app()


def run():
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
