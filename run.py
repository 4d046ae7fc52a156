#!/usr/bin/env python3
"""
Run script for the Voicelog backend
"""
import uvicorn

from voicelog.config.settings import settings
from voicelog.main import app

if __name__ == "__main__":
    uvicorn.run(app, host=settings.host, port=settings.port, reload=settings.debug)
