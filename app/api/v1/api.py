from fastapi import APIRouter
from .endpoints import (
    calendar,
    claims,
)

api_router = APIRouter()

api_router.include_router(claims.router, prefix="/claims", tags=["Claims"])
api_router.include_router(calendar.router, prefix="/calendar", tags=["Calendar"])
