import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from core.config import settings
from core.database import create_db_and_tables, session_scope
from core.errors import register_exception_handlers
from core.store import RecordStore
from core.security import purge_expired_revocations
from routes.auth import router as auth_router
from routes.registration import router as registration_router
from routes.staff import router as staff_router
from routes.receipts import router as receipts_router
from routes.organization import router as organization_router
from routes.companies import router as companies_router
from routes.subscription import router as subscription_router
from services.demo_data import seed_demo_data
from services.subscription import seed_plan_catalog

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# =========================================
# 🏁 Lifespan (store initialization)
# =========================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    create_db_and_tables()
    with session_scope() as session:
        store = RecordStore(session)
        seed_plan_catalog(store)
        purge_expired_revocations(store)
        if settings.SEED_DEMO_DATA and settings.IS_PRODUCTION:
            logger.warning("⚠️ SEED_DEMO_DATA is ignored in production.")
        elif settings.SEED_DEMO_DATA:
            seed_demo_data(store)
    logger.info("✅ Record store ready (%s).", settings.ENVIRONMENT)
    yield
    logger.info("✅ Application shutting down.")


# =========================================
#  ✅ FastAPI App
# =========================================
# Interactive docs are off in production
app = FastAPI(
    lifespan=lifespan,
    title="Receipt Capture Portal Backend",
    docs_url=None if settings.IS_PRODUCTION else "/docs",
    redoc_url=None if settings.IS_PRODUCTION else "/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


# =========================================
# 📦 Routers
# =========================================
app.include_router(registration_router)
app.include_router(auth_router, prefix="/auth", tags=["Authentication"])
app.include_router(staff_router, prefix="/staff", tags=["Staff"])
app.include_router(receipts_router, prefix="/receipts", tags=["Receipts"])
app.include_router(organization_router, prefix="/company", tags=["Company"])
app.include_router(companies_router)
app.include_router(subscription_router)


# =========================================
# 🩺 Health Check
# =========================================
@app.get("/health")
def health_check():
    return {"status": "ok", "message": "Backend is running"}


@app.get("/")
def read_root():
    return {"message": "Welcome to the Receipt Capture Portal Backend!"}
