"""
Wire schemas using Pydantic.

Provides type-safe decoding of the JSON documents this SDK consumes
itself: the Apple Music error envelope and the server-token response.
"""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class ErrorDetail(BaseModel):
    """One entry of an Apple Music error document."""

    model_config = {"extra": "ignore"}

    id: Optional[str] = ""
    title: Optional[str] = ""
    detail: Optional[str] = ""
    status: Optional[str] = ""
    code: Optional[str] = ""

    @field_validator("id", "title", "detail", "status", "code")
    @classmethod
    def null_to_empty(cls, v):
        # JSON null reads as an empty string
        return "" if v is None else v


class ErrorResponse(BaseModel):
    """Error document: {"errors": [...]}."""

    model_config = {"extra": "ignore"}

    errors: List[ErrorDetail] = Field(default_factory=list)


class UserTokenResponse(BaseModel):
    """Response of the server-side user token endpoint."""

    model_config = {"extra": "ignore"}

    access_token: str
    token_type: str
    expires_in: int
