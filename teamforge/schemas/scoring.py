"""Scoring request/response schemas (camelCase accepted for browser clients)."""

from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field


class ScoreRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    challenge_type: Any = Field(default=None, alias="challengeType")
    solution: Any = None
    challenge_content: Any = Field(default=None, alias="challengeContent")


class ScoreResult(BaseModel):
    score: int = Field(ge=0, le=100)
    feedback: List[str] = []
