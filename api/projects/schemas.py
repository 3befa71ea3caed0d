"""
Pydantic schemas for portfolio endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class ProjectCreate(BaseModel):
    name: str | None = Field(default=None, max_length=255)
    module_code: str | None = Field(default="", max_length=50)
    module_name: str | None = Field(default="", max_length=255)
    description: str | None = ""
    img: str | None = ""
    category: str | None = Field(default="", max_length=100)
    github_link: str | None = ""
    demo_link: str | None = ""
    additional_images: list[str] | None = None


class ProjectUpdate(BaseModel):
    """
    Sparse update: only keys present in the request body are applied
    (see `model_fields_set`).
    """

    name: str | None = Field(default=None, max_length=255)
    module_code: str | None = Field(default=None, max_length=50)
    module_name: str | None = Field(default=None, max_length=255)
    description: str | None = None
    img: str | None = None
    category: str | None = Field(default=None, max_length=100)
    github_link: str | None = None
    demo_link: str | None = None
    additional_images: list[str] | None = None


class ImageResponse(BaseModel):
    id: int
    image_url: str
    sort_order: int
    caption: str | None = None


class TagResponse(BaseModel):
    id: int
    name: str
    skill_category: str | None = None


class ProjectResponse(BaseModel):
    id: int
    name: str
    module_code: str | None = None
    module_name: str | None = None
    description: str | None = None
    img: str | None = None
    category: str | None = None
    github_link: str | None = None
    demo_link: str | None = None


class ProjectDetailResponse(ProjectResponse):
    images: list[ImageResponse] = Field(default_factory=list)
    tags: list[TagResponse] = Field(default_factory=list)


class MessageResponse(BaseModel):
    message: str


class ProjectCreatedResponse(MessageResponse):
    id: int
