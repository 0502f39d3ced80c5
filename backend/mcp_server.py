"""FastMCP server exposing the gossip feed as MCP tools.

Tools:
  - hot_search(limit)         : top trend tags by count
  - lookup_gossip(gossip_id)  : one article with its story

The storage is replaced via set_storage() for tests, or opened on DATA_DIR
(default ./data) when run as __main__.

Usage:
    uv run python -m backend.mcp_server
"""

from mcp.server.fastmcp import FastMCP

from gossip_world.storage import Storage

mcp = FastMCP("gossip-world")

_storage: Storage | None = None


def set_storage(storage: Storage | None) -> None:
    """Replace the active storage (used in tests)."""
    global _storage
    _storage = storage


def _require_storage() -> Storage:
    if _storage is None:
        raise RuntimeError("Storage not configured")
    return _storage


@mcp.tool()
def hot_search(limit: int = 10) -> list[dict]:
    """Return the hottest trend tags, highest count first."""
    return [
        {"tag": t.tag, "count": t.count, "story_ids": t.story_ids}
        for t in _require_storage().list_trends(limit=limit)
    ]


@mcp.tool()
def lookup_gossip(gossip_id: str) -> dict | None:
    """Return a gossip article and its story, or None if unknown or removed."""
    storage = _require_storage()
    article = storage.get_gossip(gossip_id)
    if article is None or article.removed:
        return None
    story = storage.get_story(article.story_id)
    return {
        **article.model_dump(mode="json"),
        "story": story.model_dump(mode="json") if story else None,
    }


if __name__ == "__main__":
    import os
    from pathlib import Path

    set_storage(Storage(Path(os.getenv("DATA_DIR", "data"))))
    mcp.run()
