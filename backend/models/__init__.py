"""SQLAlchemy declarative base shared by the memories models."""
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Declarative base; every table registers its metadata here."""
    pass
