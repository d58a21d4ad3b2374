"""Notification DTOs (Pydantic v2, immutable)."""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class DeliveryOutcomeDTO(BaseModel):
    """Result of processing one queued job during a drain."""

    model_config = ConfigDict(frozen=True)

    job_id: UUID
    status: str
    error: Optional[str] = None
