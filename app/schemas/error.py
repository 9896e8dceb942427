"""RFC 7807 Problem Details error response schema."""

from typing import Any, Dict, List

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """RFC 7807 Problem Details for HTTP APIs.

    See https://datatracker.ietf.org/doc/html/rfc7807
    """

    type: str = Field(
        default="about:blank",
        description="URI reference identifying the problem type.",
    )
    title: str = Field(description="Short human-readable summary of the problem.")
    status: int = Field(description="HTTP status code.")
    detail: str = Field(
        default="",
        description="Human-readable explanation specific to this occurrence.",
    )
    instance: str = Field(
        default="",
        description="URI reference identifying the specific occurrence of the problem.",
    )
    errors: List[Dict[str, Any]] = Field(
        default_factory=list,
        description="Field-level problems, each with field and message.",
    )
    context: Dict[str, Any] = Field(
        default_factory=dict,
        description="Ids and counters describing where a multi-step operation stopped.",
    )
