import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from budget_dashboard.config import get_settings
from budget_dashboard.database import init_db

settings = get_settings()
logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: create tables that are missing
    init_db()
    logger.info("%s started (database: %s)", settings.APP_NAME, settings.DATABASE_URL)
    yield


app = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get(f"{settings.API_PREFIX}/health")
def health_check():
    return {"status": "ok", "app": settings.APP_NAME}


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------

# Workbook import
from budget_dashboard.routers import imports  # noqa: E402

app.include_router(imports.router, prefix=f"{settings.API_PREFIX}/import")

# Single-line editing
from budget_dashboard.routers import budget_lines  # noqa: E402

app.include_router(budget_lines.router, prefix=f"{settings.API_PREFIX}/budget-lines")

# Program management
from budget_dashboard.routers import programs  # noqa: E402

app.include_router(programs.router, prefix=f"{settings.API_PREFIX}/programs")
