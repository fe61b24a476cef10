"""
Pydantic schemas for the critique memory API.

Provides input validation for engine operations and the detached read
model returned by the rule store.
"""

from datetime import datetime
from typing import FrozenSet

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator

STRENGTH_PRECISION = 2


def clamp_strength(value: float, floor: float = 0.1, ceiling: float = 1.0) -> float:
    """Clamp a strength into ``[floor, ceiling]`` and round to two decimals."""
    return round(min(ceiling, max(floor, value)), STRENGTH_PRECISION)


class CritiqueRuleRecord(BaseModel):
    """Snapshot of a stored critique rule, detached from any session."""

    id: int
    participant_id: int
    rule: str
    bad_pattern: str
    guidance: str
    strength: float
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True, frozen=True)

    @field_validator("strength")
    @classmethod
    def _round_strength(cls, value: float) -> float:
        return round(value, STRENGTH_PRECISION)


class CritiqueSubmission(BaseModel):
    """Schema for a critique raised against one participant's turn."""

    participant_id: int = Field(..., gt=0, description="Owning participant")
    rule: str = Field(..., min_length=1, description="Critique pattern observed")
    bad_pattern: str = Field("", description="Offending text excerpt")
    guidance: str = Field(..., min_length=1, description="Instruction for future turns")

    model_config = ConfigDict(
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {
                "participant_id": 1,
                "rule": "uses ad hominem",
                "bad_pattern": "you're wrong because...",
                "guidance": "stick to the argument",
            }
        },
    )


class TurnDecayRequest(BaseModel):
    """Schema for decaying the rules a turn did not surface."""

    participant_id: int = Field(..., gt=0)
    used_rule_ids: FrozenSet[StrictInt] = Field(default_factory=frozenset)


class GuidanceRequest(BaseModel):
    """Schema for composing guidance under a token budget."""

    participant_id: int = Field(..., gt=0)
    max_tokens: int = Field(200, gt=0)
