"""Column types that behave the same on PostgreSQL and SQLite."""

import uuid

from sqlalchemy import JSON, String, TypeDecorator


class GUID(TypeDecorator):
    """
    UUID column.

    - PostgreSQL: native UUID
    - everything else (SQLite in tests): CHAR(36) holding the canonical string
    """

    impl = String(36)
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            from sqlalchemy.dialects.postgresql import UUID as PG_UUID

            return dialect.type_descriptor(PG_UUID(as_uuid=True))
        return dialect.type_descriptor(String(36))

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if dialect.name == "postgresql":
            return value if isinstance(value, uuid.UUID) else uuid.UUID(str(value))
        return str(value)

    def process_result_value(self, value, dialect):
        if value is None or isinstance(value, uuid.UUID):
            return value
        return uuid.UUID(str(value))


class JSONPayload(TypeDecorator):
    """
    Free-form JSON object (notification payloads).

    JSONB on PostgreSQL, generic JSON elsewhere. Always hands back a dict.
    """

    impl = JSON
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            from sqlalchemy.dialects.postgresql import JSONB

            return dialect.type_descriptor(JSONB())
        return dialect.type_descriptor(JSON())

    def process_bind_param(self, value, dialect):
        if value is None:
            return {}
        # UUIDs show up in payloads built by services
        return {key: str(val) if isinstance(val, uuid.UUID) else val for key, val in value.items()}

    def process_result_value(self, value, dialect):
        return dict(value) if value else {}
