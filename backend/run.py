#!/usr/bin/env python3
# backend/run.py
"""
Development server runner for the booking store.
For local development only - uses the SQLite database from settings.
"""
import os
from pathlib import Path

import uvicorn

if __name__ == "__main__":
    os.chdir(Path(__file__).parent)
    os.environ.setdefault("ENVIRONMENT", "local")

    print("Starting tutorhub booking store...")
    print("Access at: http://localhost:8000")
    print("API Docs: http://localhost:8000/docs")

    uvicorn.run("tutorhub.main:app", host="0.0.0.0", port=8000, reload=True, log_level="info")
