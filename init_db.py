"""
Script to initialize the database with tables and seed data.
"""
from patternlab.core.config import settings
from patternlab.db.base import Database
from patternlab.db.init_db import init_db


def init() -> None:
    """Initialize database."""
    database = Database.from_url(settings.DATABASE_URL)

    print("Creating database tables...")
    database.create_all()
    print("Database tables created")

    print("Seeding initial data...")
    for db in database.session():
        init_db(db)
    print("Initial data seeded")

    database.dispose()
    print("Database initialization complete!")


if __name__ == "__main__":
    init()
