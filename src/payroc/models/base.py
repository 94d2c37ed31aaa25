"""
Base Pydantic models shared by generated request and response types.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class BaseInput(BaseModel):
    """Base class for all request models.

    Fields are declared in snake_case and sent in camelCase.
    """

    model_config = ConfigDict(
        str_strip_whitespace=True,
        validate_assignment=True,
        populate_by_name=True,
        extra="forbid",
    )

    def to_query_parameters(self) -> dict[str, Any]:
        """Serialize set fields to wire-named query parameters."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class BaseResponse(BaseModel):
    """Base class for all response models.

    Unknown fields are kept so that newer API versions do not break parsing.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)


class Link(BaseResponse):
    """A link relation, e.g. ``{"rel": "next", "href": "..."}``."""

    rel: str | None = None
    method: str | None = None
    href: str | None = None


class PaginatedList(BaseResponse):
    """Standard list response envelope."""

    limit: int | None = Field(default=None, description="Requested page size")
    count: int | None = Field(default=None, description="Items in this page")
    has_more: bool | None = Field(default=None, alias="hasMore")
    data: list[Any] = Field(default_factory=list)
    links: list[Link] = Field(default_factory=list)
