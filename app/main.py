import logging
import os
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import models  # noqa: F401 - register models with Base
from .database import Base, engine
from .domain.catalogs.router import router as catalogs_router
from .domain.clients.router import router as clients_router
from .domain.notifications.channels import NotificationChannels
from .domain.notifications.dependencies import get_channels
from .domain.notifications.router import router as notifications_router
from .domain.permissions.router import router as permissions_router
from .domain.scheduling.router import router as appointments_router
from .routes.auth import router as auth_router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("Database tables created successfully")
    except Exception as e:
        # Ignore "already exists" errors from race conditions between workers
        error_msg = str(e)
        if "already exists" in error_msg or "duplicate key" in error_msg:
            logger.info("Database tables already exist (created by another worker)")
        else:
            logger.error(f"Failed to create database tables: {e}")

    channels = NotificationChannels()
    await channels.start()
    app.state.channels = channels

    yield

    logger.info("Application shutting down...")
    await channels.close()


app = FastAPI(title="ElectroHuila Appointments API", version="1.0.0", lifespan=lifespan)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Flatten pydantic errors into a field/message list"""
    errors = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        message = error.get("msg", "Invalid value")
        # Messages from our field validators arrive as "Value error, <message>"
        if message.startswith("Value error, "):
            message = message[len("Value error, ") :]
        errors.append({"field": ".".join(loc) or None, "message": message})

    logger.warning(f"Validation error for {request.url.path}: {errors}")
    return JSONResponse(status_code=422, content={"detail": "Validation failed", "errors": errors})


# CORS Configuration
ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS",
    "http://localhost:5173,http://localhost:3000",
).split(",")

logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

# Routes
app.include_router(auth_router)
app.include_router(appointments_router)
app.include_router(clients_router)
app.include_router(catalogs_router)
app.include_router(notifications_router)
app.include_router(permissions_router)


@app.get("/")
def root():
    return {"message": "ElectroHuila Appointments API is running"}


@app.get("/health")
def health():
    return {"status": "healthy"}


@app.get("/health/channels")
async def channels_health_check(channels: NotificationChannels = Depends(get_channels)):
    """Readiness of the outbound notification channels"""
    try:
        whatsapp_ready = await channels.whatsapp_ready()
    except Exception as e:
        logger.warning(f"WhatsApp readiness check failed: {e}")
        whatsapp_ready = False
    return {
        "status": "healthy",
        "channels": {
            "gmail": {"started": channels.gmail.is_started},
            "whatsapp": {"started": channels.whatsapp.is_started, "ready": whatsapp_ready},
        },
    }
