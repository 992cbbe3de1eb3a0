import logging
from fastapi import FastAPI
from contextlib import asynccontextmanager

from posledger.config.settings import settings
from posledger.config.database import Base, engine
from posledger.core.middleware import setup_middleware
from posledger.api.v1.router import api_router

# Registrar los modelos en Base.metadata antes de crear las tablas
from posledger.shared.database import models  # noqa: F401

logger = logging.getLogger(__name__)

def configure_logging():
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s"
    )

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    configure_logging()
    logger.info("🚀 POS Ledger API Starting...")
    logger.info(f"📍 Version: {settings.version}")
    logger.info(f"🌍 Environment: {'Development' if settings.debug else 'Production'}")
    logger.info(
        f"🛒 Mercado Libre stock sync: {settings.marketplace_notify_url or 'deshabilitado'}"
    )

    Base.metadata.create_all(bind=engine)

    yield

    # Shutdown
    logger.info("🛑 POS Ledger API Shutting down...")

# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.version,
    description="Punto de venta: ventas, stock, caja, cuentas corrientes y cambios",
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan
)

# Setup middleware
setup_middleware(app)

# Include routers
app.include_router(api_router, prefix="/api/v1")

# Root endpoint
@app.get("/")
async def root():
    return {
        "message": "🚀 POS Ledger API - Ventas, stock y cuentas corrientes",
        "version": settings.version,
        "status": "running",
        "docs": "/docs" if settings.debug else "Disabled in production",
        "api": "/api/v1"
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "posledger.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
