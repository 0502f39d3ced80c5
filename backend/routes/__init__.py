"""FastAPI API endpoints under /api.

Endpoint groups: settings/health, world (init, generate-chat, actor
creation), actors, chat (rooms, messages), gossip (list, detail, fire,
instant generate), stories, hot-search.
"""

from fastapi import APIRouter

from .actors import router as actors_router
from .chat import router as chat_router
from .gossip import router as gossip_router
from .settings import router as settings_router
from .stories import router as stories_router
from .trends import router as trends_router
from .world import router as world_router

router = APIRouter()
router.include_router(settings_router)
router.include_router(world_router)
router.include_router(actors_router)
router.include_router(chat_router)
router.include_router(gossip_router)
router.include_router(stories_router)
router.include_router(trends_router)
