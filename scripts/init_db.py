"""Database initialization script.

Creates the forms, email rules and submissions tables and seeds the demo
form when the database is empty. With --reset, drops every table first.

Usage:
    python -m scripts.init_db
    python -m scripts.init_db --reset
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from formflow.core.config import get_settings
from formflow.db.session import DEMO_FORM_ID, close_db, drop_all_tables, init_db


async def main(reset: bool) -> None:
    """Create tables, optionally after dropping them."""
    settings = get_settings()
    try:
        if reset:
            print("Dropping all database tables...")
            await drop_all_tables(settings)

        await init_db(settings)
        print(f"Database initialized successfully (demo form: {DEMO_FORM_ID})")
    finally:
        await close_db()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Initialize the FormFlow database.")
    parser.add_argument("--reset", action="store_true", help="Drop all tables before creating them")
    args = parser.parse_args()
    asyncio.run(main(args.reset))
