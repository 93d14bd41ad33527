from folder_explorer.db.engine import get_engine
from folder_explorer.db.helpers import TABLE_NAME, contains_pattern, escape_like
from folder_explorer.db.memory import InMemoryEntityStore
from folder_explorer.db.migrations import downgrade_migrations, run_migrations
from folder_explorer.db.postgres import PostgresEntityStore

__all__ = [
    "TABLE_NAME",
    "InMemoryEntityStore",
    "PostgresEntityStore",
    "contains_pattern",
    "downgrade_migrations",
    "escape_like",
    "get_engine",
    "run_migrations",
]
