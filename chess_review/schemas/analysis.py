"""Pydantic schemas for game records and the analysis payload."""

from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

PlayerColor = Literal["white", "black"]
Difficulty = Literal["easy", "medium", "hard"]


class GameMetadata(BaseModel):
    """Headers of a submitted game."""

    model_config = ConfigDict(extra="ignore")

    white: str = "Unknown"
    black: str = "Unknown"
    result: str = "*"  # 1-0, 0-1, 1/2-1/2 or * when unknown
    event: Optional[str] = None
    date: Optional[str] = None
    eco: Optional[str] = None
    opening: Optional[str] = None


class Phase(BaseModel):
    """One of the opening / middlegame / endgame sections of a review."""

    model_config = ConfigDict(extra="ignore")

    name: str
    moves: Optional[str] = None
    evaluation: Optional[str] = None
    key_ideas: list[str] = Field(default_factory=list)


class KeyMoment(BaseModel):
    """A turning point of the game."""

    model_config = ConfigDict(extra="ignore")

    move_number: Optional[int] = None
    move: str
    fen: Optional[str] = ""
    evaluation: Optional[Union[str, float]] = None
    comment: str = ""
    is_mistake: bool = False


class AnalysisPayload(BaseModel):
    """The JSON object the reasoning service is asked to return.

    Only ``summary`` is mandatory; list sections may be missing but must have
    the right shape when present.
    """

    model_config = ConfigDict(extra="ignore")

    summary: str
    phases: list[Phase] = Field(default_factory=list)
    key_moments: list[KeyMoment] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    puzzles: Optional[list[dict[str, Any]]] = None

    def without_puzzles(self) -> dict[str, Any]:
        """Analysis content as stored on a job, minus the puzzle bodies."""
        return self.model_dump(exclude={"puzzles"})


class PuzzleCandidate(BaseModel):
    """A puzzle body as proposed by the reasoning service."""

    model_config = ConfigDict(extra="ignore")

    title: str
    description: str
    fen: str
    solution: str
    hint: Optional[str] = None
    difficulty: Difficulty
    theme: str

    @field_validator("difficulty", mode="before")
    @classmethod
    def normalize_difficulty(cls, v: Any) -> Any:
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("fen", "solution", "title")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()
