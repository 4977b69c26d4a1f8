"""
Column types that behave the same on PostgreSQL and SQLite.

Production runs on PostgreSQL (native UUID / JSONB); the test suite runs on
in-memory SQLite, where both fall back to text columns.
"""
import json
import uuid

from sqlalchemy import CHAR, Text, TypeDecorator
from sqlalchemy.dialects.postgresql import JSONB, UUID


class GUID(TypeDecorator):
    """
    UUID primary/foreign keys.

    Accepts either `uuid.UUID` or its string form on the way in and always
    hands back `uuid.UUID`, so ids coming from path parameters, session
    cookies and ORM rows compare equal.
    """
    impl = CHAR
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(UUID(as_uuid=True))
        return dialect.type_descriptor(CHAR(36))

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if not isinstance(value, uuid.UUID):
            value = uuid.UUID(str(value))
        if dialect.name == "postgresql":
            return value
        return str(value)

    def process_result_value(self, value, dialect):
        if value is None or isinstance(value, uuid.UUID):
            return value
        return uuid.UUID(value)


class JSON(TypeDecorator):
    """
    Schemaless blobs (custom questions, answers).

    JSONB on PostgreSQL, a serialized TEXT column elsewhere. Values are
    replaced wholesale; in-place mutation of a loaded dict/list is not tracked.
    """
    impl = Text
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(JSONB())
        return dialect.type_descriptor(Text())

    def process_bind_param(self, value, dialect):
        if value is None or dialect.name == "postgresql":
            return value
        return json.dumps(value)

    def process_result_value(self, value, dialect):
        if value is None or dialect.name == "postgresql":
            return value
        return json.loads(value)
