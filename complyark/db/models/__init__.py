# complyark/db/models/__init__.py
"""
Database models package
Imports all models for easy access
"""

# Import base classes and mixins
from complyark.db.models.base import Base, TimestampMixin, IntegerIdMixin

# Import reference data models
from complyark.db.models.organisation import Organisation, Industry
from complyark.db.models.user import User
from complyark.db.models.status import RequestStatus

# Import case models
from complyark.db.models.case import Case, CaseHistory

# Export all models
__all__ = [
    # Base classes
    'Base', 'TimestampMixin', 'IntegerIdMixin',

    # Reference data
    'Organisation', 'Industry', 'User', 'RequestStatus',

    # Cases
    'Case', 'CaseHistory',
]
