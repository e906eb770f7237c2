"""Shared schema primitives."""

import uuid
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class IDSchema(BaseSchema):
    id: uuid.UUID


class TimestampedSchema(IDSchema):
    created_at: datetime
    updated_at: datetime


class MessageResponse(BaseSchema):
    message: str


class ErrorResponse(BaseSchema):
    """Body of every non-2xx response: stable error code, human message, optional context."""

    error: str
    message: str
    details: Optional[Any] = None
