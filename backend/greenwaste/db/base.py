"""
Declarative base and common model columns.
"""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime
from sqlalchemy.dialects import mysql
from sqlalchemy.orm import declarative_base

Base = declarative_base()

# MySQL DATETIME drops fractional seconds unless fsp is given
Timestamp = DateTime().with_variant(mysql.DATETIME(fsp=6), "mysql")


def generate_uuid() -> str:
    return str(uuid.uuid4())


class BaseModel(Base):
    """Abstract base adding a UUID primary key and timestamps."""
    __abstract__ = True

    id = Column(String(36), primary_key=True, default=generate_uuid)
    created_at = Column(Timestamp, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(Timestamp, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
