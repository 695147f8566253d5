from fastapi import FastAPI

from core.config import settings
from core.db import Base, engine
from core.error_handlers import register_error_handlers
from core.observability import setup_logging
import models  # noqa: F401
from routes.query import router as query_router

setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

# Ensure tables exist (for dev/test); the store is otherwise managed outside this service
Base.metadata.create_all(bind=engine)

register_error_handlers(app)
app.include_router(query_router)


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=settings.PORT,
        reload=settings.DEBUG,
    )
