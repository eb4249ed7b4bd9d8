from fastapi import FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging

# Import configuration and database
from catalog.config.settings import settings
from catalog.config.database import connect_to_mongo, close_mongo_connection, ping_database
from catalog.exceptions import CatalogError, ConflictError, IntegrityError, NotFoundError, ValidationError
from catalog.utils.init_category_indexes import init_category_indexes

# Import API routers
from catalog.routes.categories.api import router as categories_api_router
from catalog.routes.departments.api import router as departments_api_router

# Configure logging
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

ERROR_STATUS_CODES = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
    IntegrityError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # Startup
    logger.info(f"Starting up {settings.APP_NAME}...")
    await connect_to_mongo()

    # Initialize categories collection indexes
    try:
        await init_category_indexes()
    except Exception as e:
        logger.error(f"Failed to initialize category indexes: {e}")

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info(f"Shutting down {settings.APP_NAME}...")
    await close_mongo_connection()
    logger.info("Application shutdown complete")


# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="""
    ## Liquor Store Catalog

    Category taxonomy for the online store: Departments, Categories and Subcategories.

    ### Features:
    * **Navigation tree**: nested active categories for menus
    * **Departments**: departments with their categories and subcategory names
    * **Administration**: create, update, activate/deactivate and delete categories

    ### Identity:
    Write endpoints expect the acting user's id in the `X-User-Id` header.
    """,
    lifespan=lifespan,
    debug=settings.DEBUG
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(CatalogError)
async def catalog_exception_handler(request: Request, exc: CatalogError):
    status_code = ERROR_STATUS_CODES.get(type(exc), status.HTTP_400_BAD_REQUEST)
    if status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=status_code, content=exc.to_dict())


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail}
    )


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    logger.error(f"Global exception: {exc}")
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"}
    )


# Health check endpoint
@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint"""
    database_ok = await ping_database()
    return {
        "status": "healthy" if database_ok else "degraded",
        "database": "connected" if database_ok else "unavailable",
        "app_name": settings.APP_NAME,
        "version": settings.APP_VERSION
    }


# Include API routers
app.include_router(categories_api_router)
app.include_router(departments_api_router)


# API root endpoint
@app.get("/api", tags=["API Root"])
async def api_root():
    """API root endpoint with information"""
    return {
        "message": f"Welcome to {settings.APP_NAME} API",
        "version": settings.APP_VERSION,
        "docs_url": "/docs",
        "redoc_url": "/redoc",
        "health_check": "/health"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level="info"
    )
