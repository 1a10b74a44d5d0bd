"""
FastAPI Application

Main entry point for the E-Commerce Dashboard API.

    uvicorn ecommerce_dashboard.main:app --port 5000
"""

from ecommerce_dashboard.config import get_settings
from ecommerce_dashboard.serving.api import create_api_app

settings = get_settings()

app = create_api_app()


def run() -> None:
    """Console entry point: serve the API with Uvicorn."""
    import uvicorn

    uvicorn.run(
        "ecommerce_dashboard.main:app",
        host=settings.api.host,
        port=settings.api.port,
        workers=settings.api.workers,
        reload=settings.api.reload,
        log_level=settings.monitoring.log_level.lower(),
        access_log=True,
    )


if __name__ == "__main__":
    run()
