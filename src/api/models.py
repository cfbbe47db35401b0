from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel, Field


class ToolDescriptor(BaseModel):
    description: str
    parameters: Dict[str, Any] = Field(default_factory=dict)


class ToolManifest(BaseModel):
    message: str
    tools: Dict[str, ToolDescriptor]


class ErrorResponse(BaseModel):
    error: str


class HealthResponse(BaseModel):
    status: str
    config_loaded: bool
    authenticated: bool
    tools: List[str]
    timestamp: str
