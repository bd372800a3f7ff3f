"""Pydantic schemas for User records and CRUD payloads."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator

from ideaflow.schemas.common import CamelModel, as_utc, utcnow


class SubscriptionPlan(str, Enum):
    FREE = "Free"
    PRO = "Pro"
    ENTERPRISE = "Enterprise"


class UserSortKey(str, Enum):
    USERNAME = "username"
    JOINED_AT = "joinedAt"
    SUBSCRIPTION_PLAN = "subscriptionPlan"


def _normalise_email(v: str) -> str:
    v = v.strip().lower()
    if "@" not in v:
        raise ValueError("Invalid email address")
    return v


class User(CamelModel):
    """Stored user record (``users`` collection and ``active-session``)."""

    id: str
    email: str
    username: str = ""
    password: str = ""
    is_admin: bool = False
    notifications_enabled: bool = False
    joined_at: datetime = Field(default_factory=utcnow)
    subscription_plan: SubscriptionPlan = SubscriptionPlan.FREE
    subscription_active: bool = True
    paypal_subscription_id: str | None = None
    has_completed_tour: bool = False

    @field_validator("joined_at")
    @classmethod
    def _aware_joined_at(cls, v: datetime) -> datetime:
        return as_utc(v)


class UserRead(CamelModel):
    id: str
    email: str
    username: str
    is_admin: bool
    notifications_enabled: bool
    joined_at: datetime
    subscription_plan: SubscriptionPlan
    subscription_active: bool
    has_completed_tour: bool


class RegisterRequest(CamelModel):
    email: str
    username: str = ""
    password: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return _normalise_email(v)

    @field_validator("username")
    @classmethod
    def _username(cls, v: str) -> str:
        return v.strip()


class UserCreate(RegisterRequest):
    """Admin-side creation: privileges and plan are chosen explicitly."""

    is_admin: bool = False
    subscription_plan: SubscriptionPlan = SubscriptionPlan.FREE


class ProfileUpdate(CamelModel):
    username: str | None = None
    password: str | None = Field(default=None, min_length=1)
    notifications_enabled: bool | None = None
    has_completed_tour: bool | None = None


class PlanUpdate(CamelModel):
    plan: SubscriptionPlan


class RecoveryRequest(BaseModel):
    email: str


class DirectoryCounts(BaseModel):
    total: int
    admins: int
    pro: int
    enterprise: int
