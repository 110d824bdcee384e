# complyark/db/models/status.py
"""Request status catalogue model"""
from sqlalchemy import Column, Integer, String, Boolean

from complyark.db.models.base import Base


class RequestStatus(Base):
    """Workflow stage with its SLA in days"""
    __tablename__ = "request_statuses"

    # Catalogue ids are fixed, not generated
    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(50), unique=True, nullable=False)
    sla_days = Column(Integer, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    is_terminal = Column(Boolean, default=False, nullable=False)

    def __repr__(self):
        return f"<RequestStatus name={self.name} sla_days={self.sla_days}>"
