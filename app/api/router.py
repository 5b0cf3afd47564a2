from fastapi import APIRouter
from app.api.v1.progress import router as progress_router

api_router = APIRouter()

api_router.include_router(progress_router, prefix="/progress", tags=["progress"])
