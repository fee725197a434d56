from typing import Literal

from pydantic import BaseModel, Field


class AnalysisSettings(BaseModel):
    """Tunables for a single or exhaustive analysis run."""

    numeral_policy: Literal["passthrough", "wrap", "clamp", "reject"] = "passthrough"
    rotations: int = Field(default=8, ge=1, le=8)
    top_n: int = Field(default=50, ge=1)
    high_match_threshold: float = Field(default=10.0, ge=0, le=100)
    strong_match_threshold: float = Field(default=20.0, ge=0, le=100)
    workers: int = Field(default=1, ge=1)
