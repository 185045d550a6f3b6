"""
Request bodies for the HTTP API.

Rosters and buy-ins are accepted loosely here and validated by the seating
operations, so malformed values produce the same user-facing messages as
every other caller of those operations.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class GenerateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    players: Any = None
    buy_in: Optional[float] = Field(default=None, alias="buyIn")


class ResultsRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    game_id: int = Field(alias="gameId")
    first: Optional[str] = None
    second: Optional[str] = None
    third: Optional[str] = None


class WinnerRequest(BaseModel):
    """Single-winner body kept for clients of the original results endpoint"""
    model_config = ConfigDict(populate_by_name=True)

    game_id: int = Field(alias="gameId")
    winner: Optional[str] = None


class LoginRequest(BaseModel):
    password: str = ""


class GameUpdateRequest(BaseModel):
    """Placement corrections. Omitted fields are left unchanged, null clears a slot."""
    first: Optional[str] = None
    second: Optional[str] = None
    third: Optional[str] = None
    winner: Optional[str] = None
