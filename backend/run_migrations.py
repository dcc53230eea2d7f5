"""Create the blog tables on the configured database (`DATABASE_URL`)."""
from blogapi.config import Settings
from blogapi.database import create_db_and_tables, create_db_engine


def run():
    """Create any missing tables.

    Existing tables are left untouched; schema changes to existing tables
    need a real migration tool.
    """
    settings = Settings()
    print("Using database:", settings.DATABASE_URL)
    engine = create_db_engine(settings.DATABASE_URL)
    create_db_and_tables(engine)
    engine.dispose()
    print("Tables created.")

if __name__ == '__main__':
    run()
