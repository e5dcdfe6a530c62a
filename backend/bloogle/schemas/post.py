# bloogle/schemas/post.py
"""
Pydantic schemas for blog post forms and responses.
"""
from pydantic import BaseModel, Field


class PostIn(BaseModel):
    """Create / update form fields."""
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1)


class PostOut(BaseModel):
    id: int
    title: str
    description: str
    author: str
    imageId: int | None = None
    postTime: str
