"""Test fixtures package."""

from .fake_odbc import FakeConnection, FakeCursor, FakeDatabase, FakeOdbcError, RecordingSink, column_row, fk_row

__all__ = [
    "FakeConnection",
    "FakeCursor",
    "FakeDatabase",
    "FakeOdbcError",
    "RecordingSink",
    "column_row",
    "fk_row",
]
