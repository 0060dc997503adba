# File: houselook/api/api_v1/router.py
# Status: COMPLETE
# Dependencies: fastapi
from fastapi import APIRouter

from houselook.api.api_v1.endpoints.admin import router as admin_router
from houselook.api.api_v1.endpoints.auth import router as auth_router
from houselook.api.api_v1.endpoints.payments import router as payments_router
from houselook.api.api_v1.endpoints.properties import router as properties_router
from houselook.api.api_v1.endpoints.requests import router as requests_router
from houselook.api.api_v1.endpoints.saved import router as saved_router
from houselook.api.api_v1.endpoints.users import router as users_router

api_router = APIRouter()

api_router.include_router(auth_router, prefix="/auth", tags=["authentication"])
api_router.include_router(users_router, prefix="/users", tags=["users"])
api_router.include_router(properties_router, prefix="/properties", tags=["properties"])
api_router.include_router(saved_router, prefix="/saved", tags=["saved"])
api_router.include_router(requests_router, prefix="/requests", tags=["requests"])
api_router.include_router(admin_router, prefix="/admin", tags=["admin"])
api_router.include_router(payments_router, prefix="/payments", tags=["payments"])
