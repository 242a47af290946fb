"""
Main FastAPI application.
- Preflight database test and table creation on startup
- Domain errors mapped to {"detail": ...} responses
- Database failures rolled back and reported as a generic 500
"""
from fastapi import FastAPI, Depends, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy import text
from contextlib import asynccontextmanager
import logging

from app.config import settings
from app.database import get_db, init_db, test_connection
from app.exceptions import StockroomError
from app.routers import auth_router, customers_router, orders_router, products_router, stock_router

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

INTERNAL_ERROR = {"detail": "Internal server error"}

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Preflight test, then make sure the tables exist."""
    logger.info(f"Starting {settings.APP_NAME} {settings.APP_VERSION}")

    success, message = test_connection()
    if not success:
        logger.error(f"Preflight test failed: {message}")
    else:
        logger.info(f"Preflight test passed: {message}")
        init_db()
        logger.info("Database tables verified")

    yield

    logger.info(f"Shutting down {settings.APP_NAME}")

# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description="Orders and stock for a single shop - stock is derived from an append-only ledger",
    version=settings.APP_VERSION,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(StockroomError)
async def stockroom_error_handler(request: Request, exc: StockroomError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=INTERNAL_ERROR)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"{request.method} {request.url.path} database error: {exc!r}")
    return JSONResponse(status_code=500, content=INTERNAL_ERROR)

# Include routers
for router in (auth_router, products_router, customers_router, orders_router, stock_router):
    app.include_router(router, prefix="/api")

@app.get("/health")
def health_check(db: Session = Depends(get_db)):
    """System health check, reporting database status without failing."""
    try:
        db.execute(text("SELECT 1"))
        db_status = "connected"
    except SQLAlchemyError as e:
        db_status = f"error: {e}"
        logger.warning(f"Health check database error: {e}")

    return {
        "status": "healthy",
        "service": "stockroom-orders",
        "database": db_status,
        "version": settings.APP_VERSION,
    }
