"""
Common/shared Pydantic schemas.

This module contains reusable schemas used across the application:
- Acknowledgement and error bodies
- Public configuration
- Health check response
"""

from pydantic import BaseModel, Field, ConfigDict
from typing import Any, Dict


class OkResponse(BaseModel):
    """Plain acknowledgement."""
    ok: bool = True


class ErrorResponse(BaseModel):
    """Error response model."""
    error: str


class ConfigResponse(BaseModel):
    """Client-visible configuration."""
    github_configured: bool = Field(..., alias="githubConfigured")
    base_url: str = Field(..., alias="baseUrl")

    model_config = ConfigDict(populate_by_name=True)


class HealthCheckResponse(BaseModel):
    """Health check response."""
    status: str
    backend: str
    store: Dict[str, Any]
