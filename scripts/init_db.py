#!/usr/bin/env python3
"""
One-shot helper: create the Spoonplan tables without starting the server.
"""
import asyncio
import logging

from spoonplan.config import settings
from spoonplan.db import create_db_and_tables

if __name__ == "__main__":
    logging.basicConfig(level=settings.log_level)
    asyncio.run(create_db_and_tables())
    print(f"DB tables created at {settings.db_url}.")
