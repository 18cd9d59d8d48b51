# backend/validation.py
"""
Request-body validators for the profile routes.

Each validator returns a `ValidationResult` shaped like `{errors, is_valid}`
plus the cleaned field set. Blank strings count as "not provided", which is
what makes a profile upsert sparse.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, TypeAdapter, ValidationError, field_validator

SOCIAL_PLATFORMS = ("youtube", "twitter", "linkedin", "facebook", "instagram")

_HTTP_URL = TypeAdapter(HttpUrl)


@dataclass
class ValidationResult:
    errors: Dict[str, str] = field(default_factory=dict)
    fields: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def _blank_to_none(v: Any) -> Any:
    if isinstance(v, str) and not v.strip():
        return None
    return v


def is_url(value: str) -> bool:
    """Scheme optional (http:// is assumed); otherwise pydantic's HttpUrl decides."""
    if not value or any(ch.isspace() for ch in value):
        return False
    candidate = value if "://" in value else f"http://{value}"
    try:
        _HTTP_URL.validate_python(candidate)
    except ValidationError:
        return False
    return True


# ---- Schemas ----
class ProfileInput(BaseModel):
    model_config = ConfigDict(extra="ignore")

    handle: Optional[str] = None
    company: Optional[str] = None
    website: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    status: Optional[str] = None
    githubusername: Optional[str] = None
    skills: Optional[Union[str, List[str]]] = None

    youtube: Optional[str] = None
    twitter: Optional[str] = None
    linkedin: Optional[str] = None
    facebook: Optional[str] = None
    instagram: Optional[str] = None

    @field_validator(
        "handle", "company", "website", "location", "bio", "status", "githubusername",
        *SOCIAL_PLATFORMS,
        mode="before",
    )
    @classmethod
    def _blank(cls, v):
        return _blank_to_none(v)

    @field_validator("handle")
    @classmethod
    def _handle_length(cls, v):
        if v is not None and not 2 <= len(v) <= 40:
            raise ValueError("Handle needs to be between 2 and 40 characters")
        return v

    @field_validator("website", *SOCIAL_PLATFORMS)
    @classmethod
    def _url(cls, v):
        if v is not None and not is_url(v):
            raise ValueError("Not a valid URL")
        return v


class ExperienceInput(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    title: str
    company: str
    location: Optional[str] = None
    from_: date = Field(alias="from")
    to: Optional[date] = None
    current: bool = False
    description: Optional[str] = None

    @field_validator("location", "to", "description", mode="before")
    @classmethod
    def _blank(cls, v):
        return _blank_to_none(v)


class EducationInput(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    school: str
    degree: str
    fieldofstudy: str
    from_: date = Field(alias="from")
    to: Optional[date] = None
    current: bool = False
    description: Optional[str] = None

    @field_validator("to", "description", mode="before")
    @classmethod
    def _blank(cls, v):
        return _blank_to_none(v)


# Required fields are checked up front so blanks get a friendly message
EXPERIENCE_REQUIRED = {
    "title": "Job title field is required",
    "company": "Company field is required",
    "from": "From date field is required",
}
EDUCATION_REQUIRED = {
    "school": "School field is required",
    "degree": "Degree field is required",
    "fieldofstudy": "Field of study field is required",
    "from": "From date field is required",
}


def _error_key(loc) -> str:
    key = str(loc[0]) if loc else "error"
    return "from" if key == "from_" else key


def _error_message(err: Dict[str, Any]) -> str:
    msg = err.get("msg", "Invalid value")
    if msg.startswith("Value error, "):
        return msg[len("Value error, "):]
    if err.get("type", "").startswith("date"):
        return "Invalid date, expected YYYY-MM-DD"
    return msg


def _validate(model: Type[BaseModel], data: Optional[Dict[str, Any]], required: Dict[str, str]) -> ValidationResult:
    data = dict(data or {})
    errors: Dict[str, str] = {}

    for name, message in required.items():
        if _blank_to_none(data.get(name)) is None:
            errors[name] = message

    try:
        parsed = model.model_validate(data)
    except ValidationError as exc:
        for err in exc.errors():
            errors.setdefault(_error_key(err.get("loc")), _error_message(err))
        return ValidationResult(errors=errors)

    if errors:
        return ValidationResult(errors=errors)
    return ValidationResult(fields=parsed.model_dump(mode="json", by_alias=True, exclude_none=True))


def validate_profile_input(data: Optional[Dict[str, Any]]) -> ValidationResult:
    return _validate(ProfileInput, data, {})


def validate_experience_input(data: Optional[Dict[str, Any]]) -> ValidationResult:
    return _validate(ExperienceInput, data, EXPERIENCE_REQUIRED)


def validate_education_input(data: Optional[Dict[str, Any]]) -> ValidationResult:
    return _validate(EducationInput, data, EDUCATION_REQUIRED)
