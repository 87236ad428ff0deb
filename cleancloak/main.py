# cleancloak/main.py
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from pydantic.alias_generators import to_camel
from starlette.exceptions import HTTPException as StarletteHTTPException
from cleancloak.routers import auth, users, cleaners, verification, admin, tracking
from cleancloak.db.mongo import client, db, verify_mongodb_connection, ensure_indexes
from cleancloak.core.config import settings
from cleancloak.core.jwt import token_service
from cleancloak.core.logger import get_logger
from cleancloak.utils.responses import format_error_response

logger = get_logger("main")

app = FastAPI(
    title="CleanCloak API",
    version="0.1.0",
    description="Backend for the CleanCloak cleaning services marketplace",
)

# CORS: the web and Capacitor clients send the session cookie.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


# Startup/shutdown
@app.on_event("startup")
async def startup():
    token_service.ensure_configured()
    if await verify_mongodb_connection():
        await ensure_indexes()
    logger.info(f"CleanCloak API started ({settings.ENVIRONMENT})")

@app.on_event("shutdown")
async def shutdown_db():
    client.close()


# Health checks
@app.get("/", tags=["root"], summary="Health check")
async def root():
    return {"status": "ok", "service": "CleanCloak API"}

@app.get("/api/health", tags=["root"], summary="Database health check")
async def health():
    healthy = await verify_mongodb_connection(db)
    return JSONResponse(
        status_code=200 if healthy else 503,
        content={
            "status": "OK" if healthy else "WARNING",
            "message": "CleanCloak API is running" if healthy else "Database connection issue",
            "database": {"healthy": healthy},
            "environment": settings.ENVIRONMENT,
        },
    )


# Error handlers
def _field_name(loc) -> str:
    names = [p for p in loc if isinstance(p, str) and p not in ("body", "query", "path")]
    # Wire names are camelCase.
    return to_camel(names[-1]) if names else "body"

def _validation_message(err: dict) -> str:
    if err.get("type") == "value_error" and "error" in err.get("ctx", {}):
        return str(err["ctx"]["error"])
    return err.get("msg", "Invalid value")

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=format_error_response(exc, status_code=exc.status_code, detail=exc.detail),
        headers=getattr(exc, "headers", None),
    )

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": _field_name(err.get("loc", ())), "message": _validation_message(err)}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content=format_error_response(
            exc, status_code=400, detail="Validation failed", errors=errors
        ),
    )

@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
    detail = "Internal Server Error" if settings.is_production else str(exc)
    return JSONResponse(
        status_code=500,
        content=format_error_response(exc, status_code=500, detail=detail),
    )


# Routes
app.include_router(auth.router,         prefix="/api/auth")
app.include_router(users.router,        prefix="/api/users")
app.include_router(cleaners.router,     prefix="/api/cleaners")
app.include_router(verification.router, prefix="/api/verification")
app.include_router(admin.router,        prefix="/api/admin")
app.include_router(tracking.router,     prefix="/api/tracking")
