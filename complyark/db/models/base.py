from sqlalchemy import Column, Integer, DateTime, func
from complyark.db.database import Base

class TimestampMixin:
    """Mixin for created_at timestamps"""
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

class IntegerIdMixin:
    """Mixin for integer primary keys assigned in ascending order"""
    id = Column(Integer, primary_key=True, index=True)
