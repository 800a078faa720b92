#!/usr/bin/env python3
"""
Run script for the Call Insights Backend
"""
import uvicorn

from callinsights.config.settings import settings
from callinsights.main import app

if __name__ == "__main__":
    uvicorn.run(app, host=settings.host, port=settings.port, reload=settings.debug)
