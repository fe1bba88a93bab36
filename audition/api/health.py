"""
Health check and system status endpoints
"""
from fastapi import APIRouter

from audition import __version__, state


router = APIRouter(tags=["health"])


@router.get("/")
async def health_check():
    """Health check endpoint"""
    store = state.get_store()
    return {
        "status": "ok",
        "message": "Audition Scoring Server",
        "version": __version__,
        "total_sessions": len(store.list_sessions()),
        "realtime_subscribers": state.FEED.subscriber_count(),
    }
