"""SQLAlchemy ORM model for the per-user document store"""

import uuid
from sqlalchemy import Column, DateTime, Text, JSON
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class Document(Base):
    """
    One stored record (job order, invoice, expense, salary payment).

    The body lives in `payload` as the camelCase document written by
    billing_core.domain.serialization; `collection` and `owner_id` scope it
    the way the key-value store scopes per-user collections.
    """

    __tablename__ = "document"

    id = Column(Text, primary_key=True, default=lambda: str(uuid.uuid4()))
    owner_id = Column(Text, nullable=False, index=True)
    collection = Column(Text, nullable=False, index=True)
    payload = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
