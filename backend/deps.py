"""FastAPI dependency providers.

Routes never build storage, gateway or credential objects themselves; they
ask for them here, and tests swap them out with app.dependency_overrides.
"""

import os

from fastapi import Depends, Request

from gossip_world.credentials import OAuthRefresher, StoredCredentials
from gossip_world.llm import DEFAULT_API_URL, EchoGateway, Gateway, SecondMeGateway
from gossip_world.storage import Storage


def get_storage(request: Request) -> Storage:
    return request.app.state.storage


def get_gateway(storage: Storage = Depends(get_storage)) -> Gateway:
    """Gateway selected by the "gateway" setting ("secondme" or "echo")."""
    config = storage.get_config()
    if config["gateway"] == "echo":
        return EchoGateway()
    return SecondMeGateway(
        api_url=os.getenv("SECONDME_API_URL", DEFAULT_API_URL),
        app_id=os.getenv("SECONDME_APP_ID", ""),
        timeout=float(config["gateway_timeout"]),
    )


def get_credentials(storage: Storage = Depends(get_storage)) -> StoredCredentials:
    refresher = OAuthRefresher(
        api_url=os.getenv("SECONDME_API_URL", DEFAULT_API_URL),
        client_id=os.getenv("SECONDME_APP_ID", ""),
        client_secret=os.getenv("SECONDME_APP_SECRET", ""),
    )
    return StoredCredentials(storage, refresher)
