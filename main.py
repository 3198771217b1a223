"""
BookFlow API - Main Application
Multi-tenant appointment booking for service businesses
"""
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

from bookflow.core.config import settings
from bookflow.core.exceptions import BookflowError
from bookflow.api.v1.router import api_router
from bookflow.schemas.common import fail

# Configure logging
logging.basicConfig(
    level=logging.INFO if not settings.DEBUG else logging.DEBUG,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    description="Multi-tenant appointment booking and availability API",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API router
app.include_router(api_router, prefix=settings.API_V1_PREFIX)


@app.on_event("startup")
async def startup_event():
    """Run on application startup - with graceful error handling"""
    logger.info(f"Starting {settings.APP_NAME} {settings.VERSION} ({settings.ENVIRONMENT})")

    try:
        from bookflow.core.database import init_db, test_connection

        if test_connection():
            init_db()
            logger.info("Database initialized successfully")
        else:
            logger.warning("Database is not accessible; app started in degraded mode")

    except Exception as e:
        logger.error(f"Startup error: {str(e)}")
        logger.warning("App will continue but some features may not work")


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "name": settings.APP_NAME,
        "version": settings.VERSION,
        "status": "running",
        "docs": "/docs"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint with database status"""
    try:
        from bookflow.core.database import test_connection
        db_status = "connected" if test_connection() else "disconnected"
    except Exception:
        db_status = "error"

    return {
        "status": "healthy" if db_status == "connected" else "degraded",
        "version": settings.VERSION,
        "database": db_status,
    }


# -------------------------
# ERROR HANDLERS
# -------------------------
HTTP_ERROR_CODES = {
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
}


@app.exception_handler(BookflowError)
async def bookflow_exception_handler(request, exc: BookflowError):
    """Domain errors keep their code; details travel in `data`"""
    content = fail(exc.code, exc.message)
    if exc.details:
        content["data"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = f"{location}: {first.get('msg')}" if location else str(first.get("msg", "Invalid request"))
    content = fail("VALIDATION_ERROR", message)
    content["data"] = {"errors": [{"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in errors]}
    return JSONResponse(status_code=400, content=content)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request, exc: StarletteHTTPException):
    if isinstance(exc.detail, dict):
        content = fail(exc.detail.get("error", HTTP_ERROR_CODES.get(exc.status_code, "HTTP_ERROR")),
                       exc.detail.get("message", ""))
        extra = {k: v for k, v in exc.detail.items() if k not in ("error", "message")}
        if extra:
            content["data"] = extra
    else:
        content = fail(HTTP_ERROR_CODES.get(exc.status_code, "HTTP_ERROR"), str(exc.detail))
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler"""
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content=fail("INTERNAL_SERVER_ERROR", "An unexpected error occurred")
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
