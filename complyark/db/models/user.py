# complyark/db/models/user.py
"""Staff user model"""
from sqlalchemy import Column, Integer, String, Boolean, Enum, Index

from complyark.core.records import UserRole
from complyark.db.models.base import Base, IntegerIdMixin, TimestampMixin


class User(Base, IntegerIdMixin, TimestampMixin):
    """Organisation staff; organisation_id 0 marks system administrators"""
    __tablename__ = "users"

    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False, default="")
    email = Column(String(255), unique=True, index=True, nullable=False)
    phone = Column(String(50), nullable=False, default="")
    role = Column(Enum(UserRole), nullable=False, default=UserRole.USER)
    organisation_id = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, default=True, nullable=False)

    __table_args__ = (
        Index('idx_user_org_active', 'organisation_id', 'is_active'),
    )

    def __repr__(self):
        return f"<User email={self.email}>"
