# models/base.py
from datetime import datetime, timezone

from sqlalchemy.orm import DeclarativeBase


def utcnow() -> datetime:
     """Naive UTC timestamp, matching the DateTime columns used throughout."""
     return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
     """
     Base class for all SQLAlchemy models.
     Every model declares its own __tablename__.
     """
