import uuid
from datetime import datetime

from sqlalchemy import Column, String, DateTime
from app.db.base_class import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class User(Base):
    """Login identity. Created on signup, never mutated or removed."""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_new_id)
    username = Column(String, unique=True, index=True, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
