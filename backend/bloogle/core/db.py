# bloogle/core/db.py
"""
Database configuration and initialization module.
Handles Tortoise ORM setup, database connection, and migration configuration.
"""
from tortoise import Tortoise

from bloogle.config import settings

# Database connection URL (PostgreSQL in production, SQLite in tests)
DB_URL = settings.database_url

# Tortoise ORM configuration dictionary
# This configuration is also used by Aerich for database migrations
TORTOISE_ORM = {
    "connections": {"default": DB_URL},
    "apps": {
        "models": {
            "models": [
                "bloogle.models.user",        # User model (credential store)
                "bloogle.models.session",     # Server-side login sessions
                "bloogle.models.image",       # Uploaded image blobs
                "bloogle.models.post",        # Blog posts and saved-post bookmarks
                "aerich.models",              # Required: Let Aerich manage migration tables
            ],
            "default_connection": "default",
        },
    },
    # Token and session expiry comparisons are done on aware UTC datetimes
    "use_tz": True,
    "timezone": "UTC",
}


async def init_db():
    """
    Initialize Tortoise ORM database connection.

    This function should be called during application startup to establish
    the database connection and register all models.

    Note: Schemas are only generated when GENERATE_SCHEMAS is enabled (local development).
    Use Aerich migrations for schema management in production.
    """
    await Tortoise.init(config=TORTOISE_ORM)
    if settings.generate_schemas:
        await Tortoise.generate_schemas(safe=True)


async def close_db():
    """
    Close all database connections.

    This function should be called during application shutdown to properly
    clean up database connections and resources.
    """
    await Tortoise.close_connections()
