"""
Pydantic schemas for the read-only standards API.

Projections and the master document itself are returned in their canonical
wire form and have no response schema here; these models cover the listing
and health endpoints.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HealthResponse(ApiModel):
    ok: bool = Field(..., description="Service is up", examples=[True])
    version: str = Field(..., description="Package version", examples=["2.0.0"])


class StackSummary(ApiModel):
    """One declared stack."""

    id: str = Field(..., description="Canonical stack id", examples=["python"])
    label: str = Field(..., description="Human-readable label", examples=["Python"])
    language_family: str = Field(..., description="Language family", examples=["python"])


class StackListResponse(ApiModel):
    stacks: list[StackSummary]


class CiSystemListResponse(ApiModel):
    ci_systems: list[str] = Field(..., examples=[["azure-devops", "github-actions"]])
