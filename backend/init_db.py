#!/usr/bin/env python3
# backend/init_db.py
"""
Database initialization script.

This script can be run from any directory:
    python backend/init_db.py
    cd backend && python init_db.py

The target database comes from DATABASE_URL (default: ./gemhub.db).
"""
import sys
from pathlib import Path

# Add the backend directory to Python path so 'gemhub' package is importable
backend_dir = Path(__file__).parent
sys.path.insert(0, str(backend_dir))

from gemhub.config import settings
from gemhub.database import init_database


def init_db() -> None:
    """Create all database tables defined in models."""
    print(f"Creating database tables ({'sqlite' if settings.is_sqlite else 'postgresql'})...")
    init_database()
    print("Tables created successfully!")


if __name__ == "__main__":
    init_db()
