"""
Script to initialize the database with tables and seed data.
"""
import logging

from docportal.db.base import engine, SessionLocal
from docportal.db.init_db import init_db
from docportal.models import Base

logging.basicConfig(level=logging.INFO, format='%(levelname)s:\t%(name)s\t%(message)s')
logger = logging.getLogger(__name__)


def init() -> None:
    """Initialize database."""
    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=engine)

    logger.info("Seeding demo profiles...")
    db = SessionLocal()
    try:
        init_db(db)
    finally:
        db.close()

    logger.info("Database initialization complete")


if __name__ == "__main__":
    init()
