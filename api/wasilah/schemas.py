from typing import Any, Literal
from pydantic import BaseModel, Field


class AdminLoginRequest(BaseModel):
    password: str = ""


class ImportParticipantsRequest(BaseModel):
    participants: list[dict[str, Any]] = Field(default_factory=list)


class SubmitSelectionsRequest(BaseModel):
    # Plain ids in preference order, or {"id": ..., "rank": ...} objects.
    selections: list[Any] = Field(default_factory=list)


class MatchSelectionRequest(BaseModel):
    selected: list[str] = Field(default_factory=list)
    match_id: str
    action: Literal["select", "deselect"] = "select"
    swap: bool = False
