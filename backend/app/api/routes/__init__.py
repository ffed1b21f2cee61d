from fastapi import APIRouter
from app.api.routes import match, sessions, breakdowns, redirect, admin

api_router = APIRouter()

api_router.include_router(match.router, prefix="/match", tags=["match"])
api_router.include_router(sessions.router, prefix="/sessions", tags=["sessions"])
api_router.include_router(breakdowns.router, prefix="/breakdowns", tags=["breakdowns"])
api_router.include_router(redirect.router, prefix="/redirect", tags=["redirect"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
