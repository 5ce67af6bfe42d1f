"""Shared API envelope"""
from datetime import datetime, timezone
from typing import Generic, TypeVar
from pydantic import BaseModel, Field

T = TypeVar("T")


class Meta(BaseModel):
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class Envelope(BaseModel, Generic[T]):
    """Success body: {"data": ..., "meta": {"timestamp": ...}}"""
    data: T
    meta: Meta = Field(default_factory=Meta)
