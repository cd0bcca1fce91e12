"""Pydantic schemas for API request validation."""

from __future__ import annotations

import math

from pydantic import BaseModel, Field, field_validator

# -----------------------------------------------------------------------------
# Push Schemas
# -----------------------------------------------------------------------------


class PushKeys(BaseModel):
    """Client keys from PushSubscription.toJSON()."""

    p256dh: str = Field(..., min_length=1)
    auth: str = Field(..., min_length=1)


class PushSubscriptionInfo(BaseModel):
    """The browser's PushSubscription object."""

    endpoint: str = Field(..., min_length=1, max_length=2048)
    keys: PushKeys

    @field_validator("endpoint")
    @classmethod
    def validate_endpoint(cls, v: str) -> str:
        """Push services only accept HTTPS endpoints."""
        if not v.startswith("https://"):
            raise ValueError("Push endpoint must be an https:// URL")
        return v


class SubscribeRequest(BaseModel):
    """Schema for POST /api/push/subscribe."""

    subscription: PushSubscriptionInfo
    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)
    city: str | None = Field(default=None, max_length=200)

    @field_validator("lat", "lon")
    @classmethod
    def validate_finite(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError("Coordinates must be finite numbers")
        return v

    @field_validator("city")
    @classmethod
    def strip_city(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v.strip() or None


class UnsubscribeRequest(BaseModel):
    """Schema for POST /api/push/unsubscribe."""

    endpoint: str = Field(..., min_length=1, max_length=2048)
