"""
Main FastAPI Application
"""
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.exc import IntegrityError
from contextlib import asynccontextmanager
import logging

from accounts_api.core.config import settings
from accounts_api.core.database import init_db
from accounts_api.core.exceptions import AppError
from accounts_api.core.rate_limit import RateLimitMiddleware
from accounts_api.api.v1 import (
    auth, sequences, suppliers, ap_invoices, ap_payments, invoices, receipts,
    journal_entries, chart_of_accounts, parties, customer_supplier, procurement,
    tax, companies, company_locations, assets, inventory, profile
)

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # Startup
    logger.info(f"Starting {settings.APP_NAME} ({settings.ENVIRONMENT})...")
    init_db()

    yield

    # Shutdown
    logger.info("Shutting down...")


# Create app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Rate limiting middleware (must be after CORS)
app.add_middleware(RateLimitMiddleware)


# Exception handlers
@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.message, "error": type(exc).__name__}
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [
        {
            "field": ".".join(str(part) for part in error["loc"] if part != "body"),
            "message": error["msg"],
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": "Validation failed", "errors": errors}
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.detail},
        headers=getattr(exc, "headers", None)
    )


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    logger.warning(f"Integrity error on {request.method} {request.url.path}: {exc.orig}")
    return JSONResponse(
        status_code=409,
        content={"success": False, "message": "Resource conflicts with existing data", "error": "ConflictError"}
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    message = "An unexpected error occurred" if settings.is_production else str(exc)
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": message, "error": "InternalError"}
    )


# Health check
@app.get("/api/health")
async def health_check():
    return {"status": "OK", "message": f"{settings.APP_NAME} is running", "version": settings.APP_VERSION}


# Include routers
app.include_router(auth.router, prefix="/api")
app.include_router(profile.router, prefix="/api")
app.include_router(sequences.router, prefix="/api")
app.include_router(suppliers.router, prefix="/api")
app.include_router(ap_invoices.router, prefix="/api")
app.include_router(ap_payments.router, prefix="/api")
app.include_router(invoices.router, prefix="/api")
app.include_router(receipts.router, prefix="/api")
app.include_router(journal_entries.router, prefix="/api")
app.include_router(chart_of_accounts.router, prefix="/api")
app.include_router(parties.router, prefix="/api")
app.include_router(customer_supplier.router, prefix="/api")
app.include_router(procurement.router, prefix="/api")
app.include_router(tax.regimes_router, prefix="/api")
app.include_router(tax.types_router, prefix="/api")
app.include_router(tax.rates_router, prefix="/api")
app.include_router(companies.router, prefix="/api")
app.include_router(company_locations.router, prefix="/api")
app.include_router(assets.router, prefix="/api")
app.include_router(inventory.items_router, prefix="/api")
app.include_router(inventory.bin_cards_router, prefix="/api")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)
