from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from poolstats.core import get_settings
from poolstats.api.v1 import api_router
from poolstats.core.middleware import RequestLoggingMiddleware
from poolstats.db.database import Store
from poolstats.logs.server_log import api_logger

# Get application settings
settings = get_settings()


# Lifespan event handler
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    store = Store.from_settings(settings)
    try:
        await store.init_models()
        api_logger.info(f"Database initialized ({settings.DATABASE_BACKEND.value})")
    except Exception as e:
        api_logger.error(f"Error initializing database: {e}")
        await store.close()
        raise

    app.state.store = store
    yield
    await store.close()
    api_logger.info("Database connection closed")


# Initialize FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Collector for proxy usage statistics",
    version="0.1.0",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    max_age=3600,
)

# Add request logging middleware
app.add_middleware(RequestLoggingMiddleware)

# Include API router
app.include_router(api_router)


@app.get("/")
async def root(request: Request):
    """Health check endpoint"""
    api_logger.info(f"Received health check request: {request.method} {request.url}")
    return {"message": f"{settings.PROJECT_NAME} is running"}


if __name__ == "__main__":
    import uvicorn

    api_logger.info("Starting server on http://0.0.0.0:8000")

    uvicorn.run(
        "poolstats.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level="info"
    )
