"""
Main application entry point.
"""

from src.api.app import create_app
from src.config.logging import configure_logging, get_logger
from src.config.settings import settings

configure_logging()

logger = get_logger(__name__)

# Create the main app
app = create_app()


if __name__ == "__main__":
    import uvicorn

    logger.info("Starting Course Sync Service server")

    uvicorn.run(
        "src.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=False,
        log_level=settings.LOG_LEVEL.lower(),
    )
