#!/usr/bin/env python3
"""
Run the Courtbook API with uvicorn.

    API_HOST, API_PORT   bind address (0.0.0.0:8000)
    API_RELOAD=true      auto-reload for development
"""

import os

import uvicorn

from courtbook.config import LOG_LEVEL

if __name__ == "__main__":
    uvicorn.run(
        "courtbook.main:app",
        host=os.getenv("API_HOST", "0.0.0.0"),
        port=int(os.getenv("API_PORT", "8000")),
        reload=os.getenv("API_RELOAD", "false").lower() == "true",
        log_level=LOG_LEVEL,
    )
