"""Serve the marketplace UI.

Configuration comes from the environment (see ``marketplace.config``);
``HOST`` and ``PORT`` select the listen address.

Usage:
    python run.py
"""
import os

import uvicorn

if __name__ == "__main__":
    uvicorn.run(
        "marketplace.main:app",
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
        log_level="info",
    )
