from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from roster import __version__
from roster.api.errors import register_exception_handlers
from roster.api.middleware.request_log import RequestLogMiddleware
from roster.api.routers import (
    approvals,
    auth,
    dashboard,
    database,
    health,
    master,
    notifications,
    requests,
    settings as settings_router,
    users,
)
from roster.core.config import get_settings
from roster.core.logging import configure_logging
from roster.db.session import init_db

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings)
    init_db()
    yield


app = FastAPI(
    title=settings.app_name,
    description="Workforce roster requests and position-based approvals",
    version=__version__,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.debug else settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Request logging middleware
app.add_middleware(RequestLogMiddleware)

register_exception_handlers(app)

# Include routers
app.include_router(health.router)
app.include_router(auth.router, prefix="/api")
app.include_router(requests.router, prefix="/api")
app.include_router(approvals.router, prefix="/api")
app.include_router(master.router, prefix="/api")
app.include_router(users.router, prefix="/api")
app.include_router(settings_router.router, prefix="/api")
app.include_router(notifications.router, prefix="/api")
app.include_router(notifications.cron_router, prefix="/api")
app.include_router(dashboard.router, prefix="/api")
app.include_router(database.router, prefix="/api")


@app.get("/")
async def root():
    return {
        "name": settings.app_name,
        "version": __version__,
        "docs": "/docs" if settings.debug else None,
    }
