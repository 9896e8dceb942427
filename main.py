"""
Application Requirements Tracker
FastAPI application entry point
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from app.core.config import settings
from app.core.database import engine, Base, AsyncSessionLocal
from app.core.exceptions import RequirementsError
from app.core.logging import setup_logging
from app.api import applications, documents, requirements, requirements_templates, users
# Import models to ensure they're registered with Base.metadata
from app.models import Application, ApplicationRequirement, Document, RequirementsTemplate, Task, User
from app.schemas.error import ErrorResponse
from app.services.requirements_template_service import RequirementsTemplateService

logger = logging.getLogger("app.main")


# Create database tables
async def init_db():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def seed_system_templates():
    async with AsyncSessionLocal() as session:
        await RequirementsTemplateService(session).create_system_templates()
        await session.commit()


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Initialize logging and database on startup"""
    setup_logging(settings.LOG_LEVEL)
    await init_db()
    if settings.SEED_SYSTEM_TEMPLATES:
        await seed_system_templates()
    logger.info("Started %s version=%s", settings.PROJECT_NAME, settings.VERSION)
    yield
    await engine.dispose()


# Create FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Requirements checklists, progress tracking and reusable templates for school, program and scholarship applications",
    version=settings.VERSION,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_HTTP_STATUS_TITLES = {
    400: "Bad Request",
    404: "Not Found",
    409: "Conflict",
    413: "Payload Too Large",
    422: "Unprocessable Entity",
    500: "Internal Server Error",
}


def _problem(request: Request, status_code: int, detail: str, errors=None, context=None) -> JSONResponse:
    body = ErrorResponse(
        title=_HTTP_STATUS_TITLES.get(status_code, "Error"),
        status=status_code,
        detail=detail,
        instance=request.url.path,
        errors=errors or [],
        context=jsonable_encoder(context or {}),
    )
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(),
        media_type="application/problem+json",
    )


@app.exception_handler(RequirementsError)
async def requirements_exception_handler(request: Request, exc: RequirementsError):
    """Render service errors as RFC 7807 Problem Details."""
    if exc.status_code >= 500:
        logger.error("Request failed path=%s detail=%s context=%s", request.url.path, exc.message, exc.context)
    return _problem(
        request,
        exc.status_code,
        exc.message,
        errors=getattr(exc, "errors", None),
        context=exc.context,
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Convert HTTPException to RFC 7807 Problem Details."""
    return _problem(request, exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Convert Pydantic validation errors to RFC 7807 Problem Details."""
    errors = [
        {"field": ".".join(str(part) for part in error["loc"][1:]), "message": error["msg"]}
        for error in exc.errors()
    ]
    return _problem(request, 422, "Request validation failed", errors=errors)


# Include routers
app.include_router(users.router, prefix="/users", tags=["users"])
app.include_router(applications.router, prefix="/applications", tags=["applications"])
app.include_router(requirements.router, prefix="/requirements", tags=["requirements"])
app.include_router(requirements_templates.router, prefix="/requirements-templates", tags=["requirements-templates"])
app.include_router(documents.router, prefix="/documents", tags=["documents"])


@app.get("/")
async def root():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": settings.PROJECT_NAME,
        "version": settings.VERSION
    }


@app.get("/health")
async def health():
    """Detailed health check"""
    return {
        "status": "healthy",
        "database": "connected",
        "system_templates": "seeded" if settings.SEED_SYSTEM_TEMPLATES else "disabled"
    }
