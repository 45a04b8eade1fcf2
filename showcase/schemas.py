from datetime import datetime
from typing import Any, List, Literal, Optional, Union, get_args

from pydantic import BaseModel, Field, ValidationError, field_validator

from showcase.exceptions import ProjectValidationError


# ============ Project Schemas ============

Category = Literal["bots", "servers", "tools", "templates", "designers"]
CATEGORIES = get_args(Category)

# Sentinel accepted by the listing filter
ALL_CATEGORIES = "all"

_LINK_FIELDS = ("github_url", "image_url", "project_file_url", "additional_image_url")


class _ProjectFields(BaseModel):
    """Shared field hooks for project input schemas."""

    class Config:
        extra = "forbid"

    @field_validator(*_LINK_FIELDS, "full_description", "installation_steps", mode="before", check_fields=False)
    @classmethod
    def blank_to_none(cls, value: Any) -> Any:
        # Forms submit empty strings for untouched optional inputs
        if isinstance(value, str) and not value.strip():
            return None
        return value


class ProjectCreate(_ProjectFields):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    full_description: Optional[str] = None
    category: Category
    github_url: Optional[str] = Field(None, max_length=500, pattern=r"^https?://")
    image_url: Optional[str] = Field(None, max_length=500)
    project_file_url: Optional[str] = Field(None, max_length=500)
    additional_image_url: Optional[str] = Field(None, max_length=500)
    features: List[str] = []
    installation_steps: Optional[str] = None
    is_published: bool = True


class ProjectUpdate(_ProjectFields):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    full_description: Optional[str] = None
    category: Optional[Category] = None
    github_url: Optional[str] = Field(None, max_length=500, pattern=r"^https?://")
    image_url: Optional[str] = Field(None, max_length=500)
    project_file_url: Optional[str] = Field(None, max_length=500)
    additional_image_url: Optional[str] = Field(None, max_length=500)
    features: Optional[List[str]] = None
    installation_steps: Optional[str] = None
    is_published: Optional[bool] = None

    @field_validator("title", "description", "category", "features", "is_published")
    @classmethod
    def not_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("Field may not be null")
        return value


def validate_project_input(
    payload: Any,
    partial: bool = False
) -> Union[ProjectCreate, ProjectUpdate]:
    """
    Validate raw project input against the create or update schema.
    Raises ProjectValidationError carrying one entry per offending field.
    """
    schema = ProjectUpdate if partial else ProjectCreate
    if isinstance(payload, schema):
        return payload

    try:
        return schema.model_validate(payload)
    except ValidationError as exc:
        errors = [
            {
                "field": ".".join(str(part) for part in error["loc"]) or "body",
                "message": error["msg"],
            }
            for error in exc.errors()
        ]
        raise ProjectValidationError(errors) from exc


class ProjectFilter(BaseModel):
    category: Optional[str] = None
    search_text: Optional[str] = None
    limit: int = 50
    offset: int = 0


# ============ Response Schemas ============

class AccountResponse(BaseModel):
    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    is_admin: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProjectResponse(BaseModel):
    id: int
    title: str
    description: str
    full_description: Optional[str] = None
    category: str
    github_url: Optional[str] = None
    image_url: Optional[str] = None
    project_file_url: Optional[str] = None
    additional_image_url: Optional[str] = None
    features: List[str] = []
    installation_steps: Optional[str] = None
    author_id: str
    views: int = 0
    likes: int = 0
    is_published: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProjectWithAuthorResponse(ProjectResponse):
    author: AccountResponse


class LikeResponse(BaseModel):
    liked: bool


class StatsResponse(BaseModel):
    total_projects: int
    total_users: int
    total_views: int


class UploadResponse(BaseModel):
    url: str
    filename: str


class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    status: str
    database: str


# ============ Authentication ============

class AccountProfile(BaseModel):
    """Account fields supplied by the OAuth provider on login"""
    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None


class AuthContext(BaseModel):
    """Identity of the authenticated caller"""
    account_id: str
    session_id: str
    email: Optional[str] = None
    is_admin: bool = False


class TokenPayload(BaseModel):
    sub: str  # account_id
    sid: str  # session_id
    exp: datetime
