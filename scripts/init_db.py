#!/usr/bin/env python3
"""
Initialize the FlickPick database.
Creates the users, movies and favorites tables.
"""

import sys
from pathlib import Path

# Allow running from project root
sys.path.insert(0, str(Path(__file__).parent.parent))

from flickpick.config import get_settings
from flickpick.database import init_db


def main():
    settings = get_settings()
    print("Initializing database...")
    print(f"  DATABASE_URL: {settings.DATABASE_URL[:40]}...")
    print(f"  Environment: {settings.ENVIRONMENT}")

    init_db()

    print("Database initialized successfully.")


if __name__ == "__main__":
    main()
