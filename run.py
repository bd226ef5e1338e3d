"""
Smart Widgets — Application Runner.

Usage:
    python run.py          → API server (port from API_PORT, default 8000)
    python run.py api      → API server
"""

import sys

import uvicorn

from smart_widgets.core.config import settings


def run_fastapi() -> None:
    """Start the FastAPI widget engine."""
    print(f"🚀 FastAPI → http://localhost:{settings.API_PORT}")
    if settings.DEBUG:
        print(f"📄 Docs    → http://localhost:{settings.API_PORT}/api/docs")
    uvicorn.run(
        "smart_widgets.main:app",
        host="0.0.0.0",
        port=settings.API_PORT,
        reload=settings.DEBUG,
    )


if __name__ == "__main__":
    mode = sys.argv[1].lower() if len(sys.argv) > 1 else "api"
    runners = {"api": run_fastapi}
    runner = runners.get(mode)
    if runner is None:
        print(f"Unknown mode '{mode}'. Use: api")
        sys.exit(1)
    runner()
