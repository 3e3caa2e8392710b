from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from twistlist.endpoints.router import api_router
from twistlist.database.session import engine
from twistlist.database.base import Base
from twistlist.config.settings import settings
from twistlist.exceptions import (
    BaseAPIException,
    base_api_exception_handler,
    request_validation_exception_handler,
)
from twistlist.utils.logger import get_logger, set_log_level
import twistlist.models  # noqa: F401  registers tables on Base.metadata

set_log_level(settings.LOG_LEVEL)
logger = get_logger(__name__)

# Create tables if they don't exist
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.PROJECT_VERSION
)

app.add_exception_handler(BaseAPIException, base_api_exception_handler)
app.add_exception_handler(RequestValidationError, request_validation_exception_handler)

# CORS Middleware; credentials are needed for the session cookie
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API Router
app.include_router(api_router)

@app.get("/")
def root():
    """
    Root endpoint for health check.
    """
    return {"message": f"Welcome to {settings.PROJECT_NAME}"}

def run():
    import uvicorn
    logger.info("Starting %s on port %s", settings.PROJECT_NAME, settings.PORT)
    uvicorn.run("twistlist.main:app", host="0.0.0.0", port=settings.PORT)

if __name__ == "__main__":
    run()
