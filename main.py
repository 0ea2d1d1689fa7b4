from fastapi import FastAPI, Request, Depends, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.datastructures import Headers
from slowapi.errors import RateLimitExceeded
from sqlalchemy.orm import Session
from datetime import datetime, timezone
import time
import uvicorn
import logging
from config import API_PREFIX, APP_ENV, APP_NAME, APP_VERSION, DEBUG, ALLOWED_ORIGINS, MAX_BODY_BYTES, HOST, PORT
from database import create_tables, dispose_engine, check_connection, get_db
from security.ratelimit import limiter, rate_limit_exceeded_handler, describe_limits, enforce_rate_limits
from security.auth import validate_settings

# Import routers
from guestbook.router import router as guestbook_router
from newsletter.router import router as newsletter_router
from contact.router import router as contact_router
from admin.router import router as admin_router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

STARTED_AT = time.monotonic()
GREETING = "Nothing but green lights ahead 🐾"

# Create FastAPI instance with documentation configuration
app = FastAPI(
    title=APP_NAME,
    description="Guestbook, newsletter, contact form and admin moderation API for tzvetomir.dev",
    version=APP_VERSION,
    openapi_url=f"{API_PREFIX}/openapi.json",
    docs_url=f"{API_PREFIX}/docs",
    redoc_url=f"{API_PREFIX}/redoc",
    debug=DEBUG
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

# Rate limits are counted before routing validates the body
app.middleware("http")(enforce_rate_limits)

class BodySizeLimitMiddleware:
    """Reject bodies over ``max_bytes`` whether or not Content-Length is sent."""

    def __init__(self, app, max_bytes: int):
        self.app = app
        self.max_bytes = max_bytes

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        length = Headers(scope=scope).get("content-length")
        if length and length.isdigit() and int(length) > self.max_bytes:
            response = JSONResponse(status_code=413, content={"error": "Request body too large."})
            await response(scope, receive, send)
            return

        received = 0

        async def limited_receive():
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_bytes:
                    # Raised while the route reads the body; handled like any HTTP error
                    raise HTTPException(status_code=413, detail="Request body too large.")
            return message

        await self.app(scope, limited_receive, send)

app.add_middleware(BodySizeLimitMiddleware, max_bytes=MAX_BODY_BYTES)

# Configure CORS; requests without an Origin header (curl, uptime probes) are unaffected
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "Accept"],
)

def flatten_validation_errors(errors):
    """Collapse pydantic errors into a {field: message} map, first message per field."""
    fields = {}
    for err in errors:
        if err.get("type") == "json_invalid":
            fields.setdefault("body", "Request body must be valid JSON.")
            continue
        field = ".".join(str(part) for part in err.get("loc", ()) if part != "body") or "body"
        error = err.get("ctx", {}).get("error")
        if err.get("type") == "value_error" and error:
            message = str(error)
        else:
            message = err.get("msg", "Invalid value")
        fields.setdefault(field, message)
    return fields

# Handle validation errors
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(
        f"Validation error: {exc}",
        extra={"path": request.url.path}
    )
    return JSONResponse(
        status_code=400,
        content={"error": flatten_validation_errors(exc.errors())}
    )

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    # Starlette's own 404 means no route matched at all
    if exc.status_code == 404 and exc.detail == "Not Found":
        return JSONResponse(
            status_code=404,
            content={
                "error": "Route not found",
                "hint": f"Try {API_PREFIX}/health, {API_PREFIX}/guestbook, {API_PREFIX}/newsletter, or {API_PREFIX}/contact"
            }
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None)
    )

# Add global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    # Log exception with request details for better debugging
    logger.error(
        f"Global exception: {exc}",
        extra={
            "path": request.url.path,
            "method": request.method,
            "client": request.client.host if request.client else "unknown",
        }
    )
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error" if APP_ENV == "production" else str(exc)}
    )

# Public routes (general limiter applied per route)
app.include_router(guestbook_router, prefix=f"{API_PREFIX}")
app.include_router(newsletter_router, prefix=f"{API_PREFIX}")
app.include_router(contact_router, prefix=f"{API_PREFIX}")

# Admin routes
app.include_router(admin_router, prefix=f"{API_PREFIX}")

# Root endpoint
@app.get("/")
async def root():
    return {
        "name": APP_NAME,
        "version": APP_VERSION,
        "docs": f"{API_PREFIX}/health",
        "message": GREETING
    }

# Health check endpoint, never rate limited
@app.get(f"{API_PREFIX}/health")
def health_check(db: Session = Depends(get_db)):
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": f"{int(time.monotonic() - STARTED_AT)}s",
        "database": "connected" if check_connection(db) else "disconnected",
        "version": APP_VERSION,
        "message": GREETING
    }

# Event handler to create database tables at startup
@app.on_event("startup")
async def startup_event():
    validate_settings()
    create_tables()
    logger.info("Database tables created")
    logger.info(f"Rate limits ({'enabled' if limiter.enabled else 'disabled'}): {describe_limits()}")

@app.on_event("shutdown")
async def shutdown_event():
    dispose_engine()

# Run the application
if __name__ == "__main__":
    uvicorn.run("main:app", host=HOST, port=PORT, reload=DEBUG, proxy_headers=True, forwarded_allow_ips="*")
