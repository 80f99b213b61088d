"""Pydantic models for user profiles and uploaded study resources."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from study_assistant.models.analysis import Question, Subject


class UserProfile(BaseModel):
    """Student profile stored in the ``profiles`` table."""
    user_id: str
    name: Optional[str] = None
    email: Optional[str] = None
    university: Optional[str] = None
    course: Optional[str] = None
    semester: Optional[str] = None
    created_at: Optional[datetime] = None

    def prompt_context(self) -> str:
        """Student context line embedded in the analysis prompt."""
        return ", ".join([
            self.university or "Unknown University",
            self.course or "Unknown Course",
            self.semester or "Unknown Year/Semester",
        ])


class ProfileUpdate(BaseModel):
    """Editable profile fields. Omitted fields are left unchanged on PATCH."""
    university: Optional[str] = Field(default=None, max_length=200)
    course: Optional[str] = Field(default=None, max_length=200)
    semester: Optional[str] = Field(default=None, max_length=100)


class AnalyzeTextRequest(BaseModel):
    """Body of POST /api/analyze."""
    text: Optional[str] = None


class Resource(BaseModel):
    """An uploaded PDF together with its AI analysis."""
    id: str
    title: str
    file_name: str
    file_url: str
    storage_path: Optional[str] = None
    user_id: str
    user_name: Optional[str] = None
    subject: Subject = Subject.OTHER
    topics: List[str] = Field(default_factory=list)
    summary: List[str] = Field(default_factory=list)
    questions: List[Question] = Field(default_factory=list)
    uploaded_at: Optional[datetime] = None
    analysis_error: Optional[str] = None
