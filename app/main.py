from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
import logging

# Import database components
from app.database.database import engine, Base

# Import middleware
from app.common.middleware import TenantMiddleware, SecurityHeadersMiddleware

# Import routers
from app.modules.auth.router import auth_router, users_router
from app.modules.company.router import company_router
from app.modules.clients.router import router as clients_router
from app.modules.cost_centers.router import router as cost_centers_router
from app.modules.projects.router import router as projects_router
from app.modules.workforce.router import workers_router, crews_router, job_titles_router
from app.modules.daily_reports.router import router as daily_reports_router
from app.modules.expenses.router import router as expenses_router
from app.modules.purchase_orders.router import router as purchase_orders_router
from app.modules.inventory.router import inventory_router
from app.modules.documents.router import router as documents_router
from app.modules.invoices.router import router as invoices_router, payments_router
from app.modules.reports.router import router as reports_router
from app.modules.backups.router import router as backups_router

# Import models for table creation
import app.modules.auth.models
import app.modules.company.models
import app.modules.clients.models
import app.modules.cost_centers.models
import app.modules.projects.models
import app.modules.workforce.models
import app.modules.invoices.models
import app.modules.daily_reports.models
import app.modules.expenses.models
import app.modules.purchase_orders.models
import app.modules.inventory.models
import app.modules.documents.models

from app.core.config import settings

# Configure logging
logging.basicConfig(
    level=logging.INFO if settings.ENVIRONMENT == "production" else logging.DEBUG,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Obras360 API",
    description="API multiempresa para gestión de obras: facturación, pagos, proyectos y personal",
    version="1.0.0",
    docs_url="/docs" if settings.ENVIRONMENT != "production" else None,
    redoc_url="/redoc" if settings.ENVIRONMENT != "production" else None
)

# Add middleware (order matters!)
app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(TenantMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(company_router)
app.include_router(clients_router)
app.include_router(cost_centers_router)
app.include_router(projects_router)
app.include_router(workers_router)
app.include_router(crews_router)
app.include_router(job_titles_router)
app.include_router(daily_reports_router)
app.include_router(expenses_router)
app.include_router(purchase_orders_router)
app.include_router(inventory_router)
app.include_router(documents_router)
app.include_router(invoices_router)
app.include_router(payments_router)
app.include_router(reports_router)
app.include_router(backups_router)

# Create database tables (only for development - use migrations in production)
if settings.ENVIRONMENT == "development":
    Base.metadata.create_all(bind=engine)


@app.get("/")
async def read_root():
    return {
        "message": "Obras360 API is running",
        "version": "1.0.0",
        "environment": settings.ENVIRONMENT
    }


@app.get("/health")
async def health_check():
    return {"status": "healthy", "environment": settings.ENVIRONMENT}


@app.on_event("startup")
async def startup_event():
    logger.info("Obras360 API starting up...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
