"""
Script to run the monitoring API

Usage:
    python scripts/serve.py [--reload]
"""

import argparse
import sys
import os

# Add current directory to path to allow imports from core, ingestion, etc.
sys.path.append(os.getcwd())

import uvicorn

from core.config import settings


def serve(reload: bool = False):
    uvicorn.run(
        "api.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=reload,
        log_level=settings.LOG_LEVEL.lower()
    )


def main():
    parser = argparse.ArgumentParser(description="Run the monitoring API")
    parser.add_argument("--reload", action="store_true", help="Restart on code changes")
    args = parser.parse_args()

    serve(args.reload)


if __name__ == "__main__":
    main()
