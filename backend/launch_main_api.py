#!/usr/bin/env python3
"""Launch the Healthlog API server."""
import uvicorn

from healthlog.core.config import get_settings

if __name__ == "__main__":
    settings = get_settings()

    print("=" * 60)
    print(f"Starting {settings.app_name} on http://127.0.0.1:8000")
    print(f"Database: {settings.database_url}")
    print("Press Ctrl+C to stop")
    print("=" * 60)
    print()

    uvicorn.run(
        "healthlog.main:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
    )
