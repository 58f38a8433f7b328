"""
Entry point for running the API with uvicorn (`careercatalyst-server`).
"""

import argparse
import os

import uvicorn

from .config import get_settings


def main():
    settings = get_settings()

    parser = argparse.ArgumentParser(description="CareerCatalyst backend server")
    parser.add_argument("--host", default=settings.host)
    parser.add_argument("--port", type=int, default=settings.port)
    parser.add_argument(
        "--reload",
        action="store_true",
        default=os.getenv("UVICORN_RELOAD", "false").lower() == "true",
        help="auto-reload on code changes (development only)",
    )
    args = parser.parse_args()

    uvicorn.run(
        "careercatalyst.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
        timeout_graceful_shutdown=5,
    )


if __name__ == "__main__":
    main()
