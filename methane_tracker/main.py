"""
Main FastAPI application entry point.

The ENVIRONMENT variable selects the config file (development, test,
production).
"""
import logging
import os

import uvicorn

from methane_tracker.create_app import get_app

ENVIRONMENT = os.environ.get("ENVIRONMENT", "development")

app = get_app(f"{ENVIRONMENT}.toml")


if __name__ == "__main__":
    try:
        uvicorn.run(
            app,
            host="0.0.0.0",
            port=int(os.environ.get("PORT", 8000)),
            log_level="info",
            loop="asyncio",
        )
    except Exception as e:
        logging.error(f"Error running FastAPI: {e}")
