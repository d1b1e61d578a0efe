"""Declarative base shared by every collection model."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for ORM models. One subclass per collection."""
