"""API v1 router."""
from fastapi import APIRouter

from patternlab.api.v1 import auth, learning, patterns

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(patterns.router, prefix="/patterns", tags=["Design Patterns"])
api_router.include_router(learning.router, prefix="/learning", tags=["Learning Progress"])
