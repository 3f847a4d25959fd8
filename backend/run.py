#!/usr/bin/env python3
# backend/run.py
"""
Development server runner.

Creates the schema and seeds roles before serving, so a fresh checkout
can be started with a single command:

    python backend/run.py
"""
import logging
import os
from pathlib import Path
import sys

backend_dir = Path(__file__).parent
sys.path.insert(0, str(backend_dir))
os.chdir(backend_dir)

import uvicorn

from service_booking.core.config import settings
from service_booking.init_db import init_db

logger = logging.getLogger("service_booking.run")

if __name__ == "__main__":
    logging.basicConfig(
        level=settings.log_level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    logger.info(f"Preparing database at {settings.get_database_url()}")
    init_db()
    logger.info("Serving on http://localhost:8000 (docs at /docs)")

    uvicorn.run(
        "service_booking.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.environment == "development",
        log_level=settings.log_level.lower(),
    )
