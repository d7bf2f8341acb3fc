"""Pydantic request/response models for API endpoints."""

from pydantic import BaseModel, Field


class CreateFighter(BaseModel):
    name: str
    pronouns: str = "they"
    max_hp: int = Field(default=100, gt=0)
    max_energy: int = Field(default=100, ge=0)
    speed: int = 50
    moves: list[str] = Field(default_factory=list)


class BattleBody(BaseModel):
    fighters: list[str] = Field(min_length=2, max_length=2)
    environment: str
    seed: int | None = None
    max_turns: int | None = Field(default=None, ge=1, le=1000)
