"""Author visit Pydantic schemas for request/response validation."""

from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from thesis_archive.schemas.page_visits import VisitStats


class AuthorVisitCreateRequest(BaseModel):
    """Visit event posted when an author profile is opened."""

    model_config = ConfigDict(populate_by_name=True)

    author_id: Optional[str] = Field(None, alias="authorId")
    visitor_type: Optional[str] = Field(None, alias="visitorType")
    user_id: Optional[str] = Field(None, alias="userId")

    @field_validator("author_id", "user_id", mode="before")
    @classmethod
    def coerce_identifier(cls, v: Union[str, int, None]) -> Optional[str]:
        if v is None or v == "":
            return None
        return str(v)

    def resolved_visitor_type(self) -> str:
        """Anything other than an explicit 'user' counts as a guest."""
        return "user" if self.visitor_type == "user" else "guest"


class AuthorVisitResponse(BaseModel):
    """Stored author visit row."""

    id: int
    author_id: str
    visitor_type: str
    user_id: Optional[str] = None
    ip_address: Optional[str] = None
    visit_date: Optional[datetime] = None


class RecordAuthorVisitResponse(BaseModel):
    success: bool = True
    message: str
    data: AuthorVisitResponse


class TopAuthorResponse(BaseModel):
    author_id: str
    full_name: str
    profile_picture: Optional[str] = None
    visit_count: int


class TopAuthorsResponse(BaseModel):
    top_authors: List[TopAuthorResponse]
    count: int


class AuthorVisitStatsResponse(BaseModel):
    """All-time totals for one author."""

    author_id: str
    total_visits: int
    guest_visits: int
    user_visits: int


class AuthorStatsResponse(BaseModel):
    stats: VisitStats
