"""Pydantic models for the study material analysis pipeline.

Covers the per-page text handed to the sampler and the structured
result parsed out of the Gemini reply.
"""

from enum import Enum
from typing import Any, List, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Subject(str, Enum):
    """Academic subjects the model is allowed to pick from."""
    PHYSICS = "Physics"
    CHEMISTRY = "Chemistry"
    MATHS = "Maths"
    BIOLOGY = "Biology"
    COMPUTER_SCIENCE = "Computer Science"
    OTHER = "Other"


class Difficulty(str, Enum):
    """Difficulty assigned to a practice question."""
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


class PageText(BaseModel):
    """Text extracted from one PDF page."""
    model_config = ConfigDict(frozen=True)

    page_number: int = Field(ge=1, description="1-based page number in the source PDF")
    text: str = Field(default="", description="Raw extracted text, not normalized")
    length: int = Field(default=0, ge=0, description="Character count of text")

    @model_validator(mode="before")
    @classmethod
    def _fill_length(cls, data: Any) -> Any:
        if isinstance(data, dict) and "length" not in data:
            data = {**data, "length": len(data.get("text") or "")}
        return data


class Question(BaseModel):
    """A multiple-choice practice question with exactly four options."""
    model_config = ConfigDict(frozen=True)

    question: str = Field(min_length=1, description="Question text")
    options: List[str] = Field(
        min_length=4,
        max_length=4,
        description="Option lines as written, e.g. 'A) Newton'"
    )
    correct_answer: Literal["A", "B", "C", "D"] = Field(description="Letter of the correct option")
    difficulty: Difficulty = Field(default=Difficulty.MEDIUM)


class AnalysisResult(BaseModel):
    """Structured metadata attached to an uploaded study resource.

    ``AnalysisResult()`` is the default used whenever the AI call fails.
    """
    model_config = ConfigDict(frozen=True)

    subject: Subject = Field(default=Subject.OTHER)
    topics: List[str] = Field(default_factory=list, max_length=5)
    summary: List[str] = Field(default_factory=list, max_length=5)
    questions: List[Question] = Field(default_factory=list)
