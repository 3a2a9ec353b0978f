from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import datetime


class ArticleIn(BaseModel):
    """Body of both create and update requests.

    Every field is optional here; the store decides what is required.
    """

    title: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    category: Optional[str] = None
    sites: Optional[List[str]] = None
    date: Optional[str] = None


class ArticleOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    description: str
    image: str
    category: str
    sites: List[str] = []
    date: str
    created_at: datetime = Field(alias="createdAt")


class MessageOut(BaseModel):
    message: str


class UploadOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    image_url: str = Field(alias="imageUrl")
