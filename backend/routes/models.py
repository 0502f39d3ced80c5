"""Pydantic request bodies for API endpoints."""

from pydantic import BaseModel


class GenerateChatBody(BaseModel):
    room_id: str
    human_id: str | None = None
    topic: str | None = None


class CreateActorBody(BaseModel):
    human_id: str


class UpdateActor(BaseModel):
    mood: str | None = None


class GenerateGossipBody(BaseModel):
    type: str
    target_actor_id: str
