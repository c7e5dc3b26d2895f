from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from sqlalchemy import text
from starlette.datastructures import Headers
from starlette.exceptions import HTTPException as StarletteHTTPException
from structlog import get_logger

from app.config import settings
from app.core.logging import setup_logging
from app.database import AsyncSessionFactory
from app.exceptions import ReceiptError, StoreError
from app.routers import receipts

logger = get_logger(__name__)


class EmptyPreflightCORSMiddleware(CORSMiddleware):
    """CORS middleware whose accepted preflights carry no body."""

    def preflight_response(self, request_headers: Headers) -> Response:
        response = super().preflight_response(request_headers)
        if response.status_code != 200:
            return response
        headers = {
            key: value
            for key, value in response.headers.items()
            if key not in ("content-length", "content-type")
        }
        return Response(status_code=200, headers=headers)


app = FastAPI(title="Receipt Service")
app.add_middleware(
    EmptyPreflightCORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(receipts.router)


@app.on_event("startup")
async def startup_event():
    setup_logging()


@app.exception_handler(ReceiptError)
async def receipt_error_handler(request: Request, exc: ReceiptError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    logger.error("Receipt store failure", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=500, content={"error": "Receipt store unavailable"})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    detail = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse(status_code=400, content={"error": detail})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error", path=request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


@app.get("/health", tags=["health"])
async def health():
    details = {"status": "ok"}
    try:
        async with AsyncSessionFactory() as session:
            await session.execute(text("SELECT 1"))
        details["database"] = "up"
    except Exception as e:
        details["status"] = "degraded"
        details["database"] = f"down: {str(e)}"
    # Presence only, never the values
    details["config"] = {
        "db_url_set": bool(settings.DATABASE_URL),
        "user_management_url_set": bool(settings.USER_MANAGEMENT_URL),
        "receipt_number_prefix": settings.RECEIPT_NUMBER_PREFIX,
    }
    try:
        async with AsyncSessionFactory() as session:
            result = await session.execute(text("SELECT COUNT(1) FROM receipts"))
            count = result.scalar() or 0
        details["receipts_count"] = int(count)
    except Exception as e:
        details["receipts_count"] = f"error: {str(e)}"
    return details
