"""Typed records for the JSON the model returns."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, List, Optional, Type, TypeVar

from pydantic import BaseModel, Field, ValidationError, field_validator

from career_matcher.errors import LLMResponseError

ModelT = TypeVar("ModelT", bound=BaseModel)


class ServiceOption(str, enum.Enum):
    ANALYSIS = "analysis"
    IMPROVED = "improved"
    COMPLETE = "complete"

    @classmethod
    def parse(cls, value: Any) -> Optional["ServiceOption"]:
        try:
            return cls(value)
        except ValueError:
            return None


class AnalysisResult(BaseModel):
    """Fit analysis between a CV and a target role."""

    match_score: int = Field(..., ge=0, le=100)
    summary: str
    missing_keywords: List[str]
    critical_gaps: List[str]
    actionable_fixes: List[str]
    interview_prep_questions: List[str]


class ExperienceEntry(BaseModel):
    company: str = ""
    role: str = ""
    dates: str = ""
    bullet_points: List[str] = Field(default_factory=list)


class ImprovedCV(BaseModel):
    """A rewritten CV, structured for the PDF templates."""

    full_name: str
    contact_info: str
    professional_summary: str
    technical_skills_list: List[str]
    experience: List[ExperienceEntry]
    education: str
    title: Optional[str] = None
    languages: List[str] = Field(default_factory=list)

    @field_validator("education", mode="before")
    @classmethod
    def _join_education(cls, value: Any) -> Any:
        # The model sometimes returns one entry per list item.
        if isinstance(value, list):
            return "\n".join(str(item) for item in value)
        return value


@dataclass(frozen=True)
class WorkflowOutput:
    content: bytes
    mimetype: str
    filename: str


def parse_model_payload(model: Type[ModelT], payload: Any, *, label: str) -> ModelT:
    """Validate decoded model output, raising `LLMResponseError` on mismatch."""
    if not isinstance(payload, dict):
        raise LLMResponseError(f"{label} response was not a JSON object")
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        fields = sorted({".".join(str(part) for part in err["loc"]) for err in exc.errors()})
        raise LLMResponseError(
            f"{label} response did not match the expected schema ({', '.join(fields)})"
        ) from exc
