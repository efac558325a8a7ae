"""
Main FastAPI application
"""
import json
import logging
import os
import time
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from formcraft.config.database import db_config
from formcraft.config.settings import settings
from formcraft.database.db_operations import db_ops, store_supervisor
from formcraft.database.mongo_store import MongoStore
from formcraft.routes import auth, form, public
from formcraft.utils.errors import FormCraftError, ValidationError

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown events"""
    # Startup
    connected = await db_config.connect_db()
    if db_config.client is not None:
        durable = MongoStore(db_config)
        if connected:
            try:
                await durable.ensure_indexes()
            except Exception as e:
                logger.warning("⚠️ Could not create indexes: %s", e)
        store_supervisor.attach_durable(durable, healthy=connected)
    logger.info("🚀 %s v%s started (store mode: %s)", settings.APP_NAME, settings.VERSION, store_supervisor.mode)
    yield
    # Shutdown
    await db_config.close_db()
    logger.info("👋 Application shutdown")


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    lifespan=lifespan
)
app.state.db_ops = db_ops
app.state.templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials="*" not in settings.ALLOWED_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(FormCraftError)
async def formcraft_exception_handler(request: Request, exc: FormCraftError):
    content = {"detail": exc.message}
    if isinstance(exc, ValidationError):
        content["errors"] = [e.to_dict() for e in exc.errors]
    if exc.status_code >= 500:
        logger.error("❌ %s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    # Round-trip through json with default=str to handle non-serializable objects (e.g. ValueError)
    safe_errors = json.loads(json.dumps(exc.errors(), default=str))
    logger.warning("❌ 422 VALIDATION ERROR on %s %s: %s", request.method, request.url.path, safe_errors)
    return JSONResponse(status_code=422, content={"detail": safe_errors})


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    duration = time.time() - start_time
    logger.info("🌐 %s %s - %s (%.2fs)", request.method, request.url.path, response.status_code, duration)
    return response


# Uploaded file answers
os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")

# Include routers
app.include_router(auth.router, prefix="/api")
app.include_router(form.router, prefix="/api")
app.include_router(public.router)


@app.get("/api/health")
async def health_check(request: Request):
    """Health check endpoint"""
    return {
        "status": "OK",
        "message": "Server is running",
        "store": await request.app.state.db_ops.health(),
    }
