#!/usr/bin/env python3
"""
Run script for the Eco moderation service
"""
import uvicorn

from eco_moderation.config.settings import settings
from eco_moderation.main import app

if __name__ == "__main__":
    uvicorn.run(app, host=settings.host, port=settings.port, reload=settings.debug)
