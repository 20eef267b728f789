"""GoldGoal - savings goal tracker API."""
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.errors import register_exception_handlers
from app.config import get_settings

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup: create tables and drop sessions past their expiry
    from app.database import Base, engine, get_db_context
    from app.services.session_store import SessionStore

    # Import all models so they're registered with Base
    from app import models  # noqa: F401

    Base.metadata.create_all(bind=engine)

    with get_db_context() as db:
        SessionStore(db).purge_expired()

    logger.info(f"{settings.app_name} started")
    yield


app = FastAPI(
    title=settings.app_name,
    description="Track savings goals, products and contributions with device-scoped sessions",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "app": settings.app_name}


# Import and include routers
from app.api import admin, auth, products, profile, savings_logs  # noqa: E402

app.include_router(auth.router, prefix="/api")
app.include_router(profile.router, prefix="/api")
app.include_router(products.router, prefix="/api")
app.include_router(savings_logs.router, prefix="/api")
app.include_router(admin.router, prefix="/api")
