#!/usr/bin/env python3
"""
Startup script for the Liquor Store Catalog
"""
import uvicorn
from catalog.config.settings import settings

if __name__ == "__main__":
    print(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    print(f"Debug mode: {settings.DEBUG}")
    print(f"MongoDB database: {settings.MONGO_DATABASE}")
    print("Server will be available at:")
    print("  - API: http://localhost:8000/api/categories/")
    print("  - Interactive Docs: http://localhost:8000/docs")
    print("\nPress Ctrl+C to stop the server")

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level="info" if not settings.DEBUG else "debug"
    )
