# complyark/utils/validators.py
from typing import Dict, List, Optional


class EmailValidator:
    """Email validation utilities"""

    @classmethod
    def normalize_email(cls, email: str) -> str:
        """Normalize email address"""
        return email.lower().strip()

    @classmethod
    def has_minimal_format(cls, email: str) -> bool:
        """Minimal intake check: the address must contain an @"""
        return "@" in email


class RequiredFieldValidator:
    """Presence checks for submitter-provided text fields"""

    @staticmethod
    def is_blank(value: Optional[str]) -> bool:
        return value is None or not value.strip()

    @classmethod
    def missing_fields(cls, values: Dict[str, Optional[str]]) -> List[str]:
        """
        Names of blank fields, in the order given

        Args:
            values: Mapping of field name to submitted value
        """
        return [name for name, value in values.items() if cls.is_blank(value)]
