# complyark/db/models/organisation.py
"""Organisation and industry models for multi-tenancy"""
from sqlalchemy import Column, Integer, String, Text, ForeignKey, Index
from sqlalchemy.orm import relationship

from complyark.db.models.base import Base, IntegerIdMixin


class Industry(Base, IntegerIdMixin):
    """Industry reference data"""
    __tablename__ = "industries"

    name = Column(String(255), unique=True, nullable=False)

    def __repr__(self):
        return f"<Industry name={self.name}>"


class Organisation(Base, IntegerIdMixin):
    """Tenant whose cases are isolated from other organisations"""
    __tablename__ = "organisations"

    business_name = Column(String(255), nullable=False, index=True)
    business_address = Column(Text, nullable=False, default="")
    industry_id = Column(Integer, ForeignKey("industries.id", ondelete="SET NULL"), nullable=True)
    contact_person_name = Column(String(255), nullable=False, default="")
    contact_email_address = Column(String(255), nullable=False, default="")
    contact_phone_number = Column(String(50), nullable=False, default="")
    no_of_users = Column(Integer, nullable=False, default=0)
    remarks = Column(Text, nullable=False, default="")

    # Relationships
    industry = relationship("Industry")
    cases = relationship("Case", back_populates="organisation")

    __table_args__ = (
        Index('idx_org_industry', 'industry_id'),
    )

    def __repr__(self):
        return f"<Organisation business_name={self.business_name}>"
