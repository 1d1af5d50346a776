#!/usr/bin/env python3
"""
Development startup script for the Story to Tests API
"""

import shutil
import sys
from pathlib import Path


def main():
    """Main startup function"""
    print("🚀 Starting Story to Tests...")

    # Check if .env exists
    env_file = Path(".env")
    if not env_file.exists():
        print("⚠️  .env file not found. Creating from .env.example...")
        if Path(".env.example").exists():
            shutil.copy(".env.example", ".env")
            print("✅ .env file created. Set SESSION_SECRET and a generation provider key.")
        else:
            print("❌ .env.example not found!")
            sys.exit(1)

    # Check if virtual environment is activated
    if not (hasattr(sys, 'base_prefix') and sys.base_prefix != sys.prefix):
        print("⚠️  Virtual environment not detected. Consider using venv or conda.")

    import uvicorn
    from storytests.config.settings import settings

    base = f"http://{settings.host}:{settings.port}"
    print(f"🌟 UI: {base}/")
    print(f"📚 API Documentation: {base}{settings.api_prefix}/docs")
    print(f"🏥 Health Check: {base}{settings.api_prefix}/health")
    print(f"   CORS_ORIGIN = {settings.cors_origin}")
    print("🔄 Use Ctrl+C to stop the server")

    try:
        uvicorn.run(
            "main:app",
            host=settings.host,
            port=settings.port,
            reload=True,
            log_level=settings.log_level.lower()
        )
    except KeyboardInterrupt:
        print("\n👋 Server stopped by user")


if __name__ == "__main__":
    main()
