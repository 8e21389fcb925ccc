"""
API routes for the auction tracker.
"""

from fastapi import APIRouter

from auction_tracker.api import calculations, entries

router = APIRouter()

# Include sub-routers
router.include_router(entries.router, prefix="/entries", tags=["entries"])
router.include_router(calculations.router, prefix="/calculate", tags=["calculations"])
