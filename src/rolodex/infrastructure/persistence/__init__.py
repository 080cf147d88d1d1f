"""Relational persistence: SQLAlchemy engine factory, table bootstrap and the SQL repository."""
