from fastapi import APIRouter

from app.api.v1 import operations

api_router = APIRouter()
api_router.include_router(operations.router, prefix="/operations", tags=["operations"])
