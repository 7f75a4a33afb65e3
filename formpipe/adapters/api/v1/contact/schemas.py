"""Response models for the contact endpoint (used for the OpenAPI schema)."""

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field


class SubmissionSuccessResponse(BaseModel):
    success: bool = True
    message: str = Field(default="Email sent successfully")


class ErrorResponse(BaseModel):
    success: bool = False
    error: str


class FieldFailure(BaseModel):
    field: str
    value: str
    rules: Dict[str, Any]
    message: str


class ValidationErrorResponse(BaseModel):
    success: bool = False
    errors: List[FieldFailure]


class RateLimitedResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = False
    error: str
    retry_after: int = Field(alias="retryAfter")
