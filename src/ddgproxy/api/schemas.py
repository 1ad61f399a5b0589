"""Pydantic request schemas for API endpoints."""
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict


class ChatCompletionsRequest(BaseModel):
    # Turns stay loosely typed; malformed ones are skipped, not rejected.
    model_config = ConfigDict(extra="allow")

    model: Optional[str] = None
    messages: Optional[List[Any]] = None
    stream: Optional[bool] = False
