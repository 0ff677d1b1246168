from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declarative_base

Base = declarative_base()

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), 'postgresql')


def in_list(values) -> str:
    """Render values as a quoted SQL IN list for check constraints."""
    return ", ".join(f"'{v}'" for v in values)
