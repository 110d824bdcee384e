# complyark/exceptions/auth.py
from fastapi import HTTPException, status

class AuthenticationError(HTTPException):
    """Caller could not be identified"""
    def __init__(self, detail: str = "Authentication failed"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail
        )

class UnknownUserError(AuthenticationError):
    """X-User-Id does not match a user"""
    def __init__(self):
        super().__init__(detail="Could not validate user")

class InactiveUserError(HTTPException):
    """User account is inactive"""
    def __init__(self):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive"
        )

class PermissionDeniedError(HTTPException):
    """Caller lacks the role for this action"""
    def __init__(self, detail: str = "Access denied"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail
        )
