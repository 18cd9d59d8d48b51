# backend/schemas_profile.py
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

class OwnerOut(BaseModel):
    id: int
    name: Optional[str] = None
    avatar: Optional[str] = None

class ExperienceOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: Optional[str] = None
    company: Optional[str] = None
    location: Optional[str] = None
    from_: Optional[str] = Field(None, alias="from")
    to: Optional[str] = None
    current: bool = False
    description: Optional[str] = None

class EducationOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    school: Optional[str] = None
    degree: Optional[str] = None
    fieldofstudy: Optional[str] = None
    from_: Optional[str] = Field(None, alias="from")
    to: Optional[str] = None
    current: bool = False
    description: Optional[str] = None

class ProfileOut(BaseModel):
    id: int
    user: OwnerOut
    handle: Optional[str] = None
    company: Optional[str] = None
    website: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    status: Optional[str] = None
    githubusername: Optional[str] = None
    skills: List[str] = []
    social: Dict[str, str] = {}
    experience: List[ExperienceOut] = []
    education: List[EducationOut] = []
    version: int
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
