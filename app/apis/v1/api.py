# app/apis/v1/api.py
from fastapi import APIRouter
from .endpoints import auth, hoardings
from app.core.config import settings

api_router = APIRouter()

api_router.include_router(auth.router, prefix=settings.API_PREFIX + "/auth", tags=["auth"])
api_router.include_router(hoardings.router, prefix=settings.API_PREFIX + "/hoardings", tags=["hoardings"])
