#!/usr/bin/env python3
"""
Script to completely reset the purchase records store - drops the purchase_orders
table and recreates it empty.

WARNING: This will delete ALL purchase orders! Uploaded bill files are left in place.
"""

import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Load environment variables from .env file if it exists
from dotenv import load_dotenv
load_dotenv(os.path.join(os.path.dirname(os.path.dirname(__file__)), '.env'))

from purchase_records.database import engine, Base, masked_database_url
import purchase_records.models  # noqa: F401
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def reset_database(bind=engine, confirm=input) -> bool:
    """Drop and recreate all tables. Returns False when the user aborts."""
    logger.warning("=" * 60)
    logger.warning("WARNING: This will DELETE ALL PURCHASE ORDERS in the store!")
    logger.warning(f"Database URL: {masked_database_url(str(bind.url))}")
    logger.warning("=" * 60)

    response = confirm("Are you sure you want to continue? (yes/no): ")
    if response.strip().lower() != "yes":
        logger.info("Aborted.")
        return False

    try:
        logger.info("Dropping all tables...")
        Base.metadata.drop_all(bind=bind)
        logger.info("Creating all tables...")
        Base.metadata.create_all(bind=bind)
    except Exception as e:
        logger.error(f"Error resetting database: {e}", exc_info=True)
        raise

    logger.info("Database reset complete!")
    return True


if __name__ == "__main__":
    reset_database()
