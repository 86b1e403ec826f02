"""
Pydantic models for quiz responses.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

FIELD_ORDER = ("ts", "lang", "gender", "q1", "q2", "q3", "q4", "q5")
SCORE_FIELDS = ("q1", "q5")


class ResponseRecord(BaseModel):
    """
    A validated submission, ready to insert.
    """

    ts: str = Field(..., min_length=1)
    lang: str = Field(..., min_length=1)
    gender: str = Field(..., min_length=1)
    q1: int = Field(..., ge=1, le=5)
    q2: str = Field(..., min_length=1)
    q3: str = Field(..., min_length=1)
    q4: str = Field(..., min_length=1)
    q5: int = Field(..., ge=1, le=5)

    def insert_args(self) -> tuple:
        return tuple(getattr(self, name) for name in FIELD_ORDER)


class StoredResponse(BaseModel):
    """
    A row as read back from storage. Input constraints are not re-applied:
    rows may have been written by other tools.
    """

    id: int
    ts: str
    lang: str
    gender: str
    q1: int
    q2: str
    q3: str
    q4: str
    q5: int
