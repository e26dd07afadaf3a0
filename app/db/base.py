"""Declarative base shared by every ORM model."""
import uuid

from sqlalchemy import BigInteger, Integer
from sqlalchemy.orm import DeclarativeBase

# SQLite only auto-increments an INTEGER PRIMARY KEY.
BigIntId = BigInteger().with_variant(Integer, "sqlite")


def new_id() -> str:
    """Primary key for catalogue and recipe rows."""
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    # Load server-generated timestamps at flush; lazy loads fail under asyncio.
    __mapper_args__ = {"eager_defaults": True}
