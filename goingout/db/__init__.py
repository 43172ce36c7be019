"""Database Package — SQLAlchemy declarative Base shared by models and migrations.

Invariants:
    - Single Base / metadata for the whole application
"""
