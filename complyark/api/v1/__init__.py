"""API v1 endpoints"""
from fastapi import APIRouter
from .endpoints import users, organizations, cases, public

api_router = APIRouter()
api_router.include_router(public.router, prefix="/public", tags=["public"])
api_router.include_router(cases.router, prefix="/cases", tags=["cases"])
api_router.include_router(cases.status_router, prefix="/statuses", tags=["statuses"])
api_router.include_router(organizations.router, prefix="/organizations", tags=["organizations"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
