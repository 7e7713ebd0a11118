#!/usr/bin/env python3
# backend/run.py
"""
Development server runner.

Creates missing tables on startup so a fresh local database works without
a separate migration step.
"""
import os
from pathlib import Path
import sys

# Add backend to path
backend_dir = Path(__file__).parent
sys.path.insert(0, str(backend_dir))
os.chdir(backend_dir)

os.environ.setdefault("CREATE_TABLES_ON_STARTUP", "true")

import uvicorn

from drivigo.core.config import settings

if __name__ == "__main__":
    print(f"Starting development server ({settings.environment})")
    print(f"Access at: http://localhost:{settings.port}")
    print(f"API Docs: http://localhost:{settings.port}/docs")

    uvicorn.run(
        "drivigo.main:fastapi_app",
        host="0.0.0.0",
        port=settings.port,
        reload=True,
        log_level="info",
    )
