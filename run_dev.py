# run_dev.py
"""
Local development launcher for the guide API.
Equivalent to: `uvicorn src.app:app --reload --host 0.0.0.0 --port 8000`
Set GUIDE_BACKEND=echo to try it without an API key.
"""

import os

import uvicorn

from src.settings import settings

if __name__ == "__main__":
    uvicorn.run(
        "src.app:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
