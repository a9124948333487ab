from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict


# --- Comment ---

class CommentCreate(BaseModel):
    # Missing fields arrive as "" so the store's validation order decides
    # which error the client sees.
    name: str = ""
    content: str = ""


class CommentResponse(BaseModel):
    id: int
    name: str
    content: str
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class CommentPage(BaseModel):
    total: int
    comments: list[CommentResponse] = []


# --- Envelope ---

class ApiResponse(BaseModel):
    """Uniform response body; ``code`` is 0 on success, else the HTTP status."""

    code: int = 0
    msg: str = "success"
    data: Any = None


# --- Health / Metrics ---

class HealthResponse(BaseModel):
    status: str = "ok"
    database: str = "connected"


class MetricsResponse(BaseModel):
    total_comments: int
    cache_info: dict = {}
