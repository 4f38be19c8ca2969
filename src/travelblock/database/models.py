# database/models.py
from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
from travelblock.database.engine import Base


class KeyValue(Base):
    """
    String-valued key/value pair. Backs the small amount of state the app
    persists: the home airport and the onboarding flag.
    """
    __tablename__ = 'kv_store'

    key = Column(String, primary_key=True)
    value = Column(String, nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())
