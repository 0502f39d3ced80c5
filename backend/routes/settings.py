"""Health check and settings endpoints."""

from fastapi import APIRouter, Depends

from backend.deps import get_storage
from gossip_world.storage import Storage

router = APIRouter()


@router.get("/health")
async def health():
    """Health check."""
    return {"status": "ok"}


@router.get("/settings")
async def get_settings(storage: Storage = Depends(get_storage)):
    """Get app settings (gateway, thresholds, anonymous fire, pacing)."""
    return storage.get_config()


@router.patch("/settings")
async def update_settings(body: dict, storage: Storage = Depends(get_storage)):
    """Update app settings (partial merge; unknown keys ignored)."""
    return storage.update_config(body)
