"""
Health check and system status endpoints
"""
from fastapi import APIRouter
from judging import state


router = APIRouter(tags=["health"])


@router.get("/")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "ok",
        "message": "Judging Engine",
        "version": "1.0.0",
        "store_ready": state.STORE is not None,
    }
