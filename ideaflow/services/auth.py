"""
Session / auth manager: registration, login, logout, profile edits.

The active identity lives in an :class:`ActiveSession` handed to the
manager by its caller; nothing here reads ambient global state.  The
session is mirrored to the ``active-session`` key so an embedding client
can restore it on start-up.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from ideaflow.core.config import settings
from ideaflow.core.exceptions import (DecodeFailure, DuplicateEmail,
                                      InvalidCredentials, NotFound,
                                      ValidationFailure)
from ideaflow.core.security import get_password_hash, needs_rehash, verify_password
from ideaflow.schemas.user import ProfileUpdate, SubscriptionPlan, User
from ideaflow.store.collection import Collection
from ideaflow.store.persistent import PersistentStore, StoreKey

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = {
    "username",
    "password",
    "notifications_enabled",
    "has_completed_tour",
    "subscription_plan",
    "subscription_active",
    "paypal_subscription_id",
}


def admin_policy(email: str) -> tuple[bool, SubscriptionPlan]:
    """Privileges and starting plan for a self-registered e-mail."""
    email = email.lower()
    if email in settings.ADMIN_EMAILS:
        return True, SubscriptionPlan.ENTERPRISE
    local_part = email.split("@", 1)[0]
    is_admin = settings.ADMIN_SUBSTRING_RULE and "admin" in local_part
    return is_admin, SubscriptionPlan.FREE


class ActiveSession:
    """Nullable identity slot for one client."""

    def __init__(self, user: User | None = None) -> None:
        self.user = user

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    def clear(self) -> None:
        self.user = None


class SessionManager:
    def __init__(self, store: PersistentStore, session: ActiveSession | None = None) -> None:
        self._store = store
        self._users: Collection[User] = Collection(store, StoreKey.USERS, User)
        self.session = session if session is not None else ActiveSession()

    # ── Session slot ───────────────────────────────────────────────
    async def _start(self, user: User) -> None:
        self.session.user = user.model_copy()
        await self._store.write(
            StoreKey.ACTIVE_SESSION,
            user.model_dump(mode="json", by_alias=True, exclude_none=True, exclude={"password"}),
        )

    async def restore(self) -> User | None:
        """Load the persisted session into the slot, if there is one."""
        try:
            raw = await self._store.read(StoreKey.ACTIVE_SESSION)
        except DecodeFailure as exc:
            logger.warning("Ignoring unreadable session: %s", exc)
            raw = None

        user = None
        if raw is not None:
            try:
                user = User.model_validate(raw)
            except ValidationError:
                logger.warning("Ignoring malformed session record")
        self.session.user = user
        return user.model_copy() if user else None

    async def logout(self) -> None:
        user = self.session.user
        self.session.clear()
        try:
            raw = await self._store.read(StoreKey.ACTIVE_SESSION)
        except DecodeFailure:
            raw = None
        stored_id = raw.get("id") if isinstance(raw, dict) else None
        if user is None or stored_id is None or stored_id == user.id:
            await self._store.remove(StoreKey.ACTIVE_SESSION)
        if user is not None:
            logger.info("User %s logged out", user.id)

    # ── Auth ───────────────────────────────────────────────────────
    async def register(self, email: str, username: str, password: str) -> User:
        email = email.strip().lower()
        is_admin, plan = admin_policy(email)

        async with self._users.editing() as users:
            if users.find(lambda u: u.email.lower() == email):
                raise DuplicateEmail()
            user = users.append(
                User(
                    id=users.new_id(),
                    email=email,
                    username=username.strip(),
                    password=get_password_hash(password),
                    is_admin=is_admin,
                    notifications_enabled=False,
                    subscription_plan=plan,
                    subscription_active=True,
                    has_completed_tour=False,
                )
            )

        logger.info("Registered user %s (%s, admin=%s)", user.id, email, is_admin)
        await self._start(user)
        return user.model_copy()

    async def login(self, email: str, password: str) -> User:
        email = email.strip().lower()
        async with self._store.lock(StoreKey.USERS):
            await self._users.load()
            user = self._users.find(lambda u: u.email.lower() == email)
            if user is None or not verify_password(password, user.password):
                raise InvalidCredentials()

            if needs_rehash(user.password):
                user = self._users.replace(
                    user.model_copy(update={"password": get_password_hash(password)})
                )
                await self._users.save()
                logger.info("Upgraded stored password hash for user %s", user.id)

        await self._start(user)
        return user.model_copy()

    async def request_recovery(self, email: str) -> bool:
        """Simulated: nothing is sent, the request is always accepted."""
        logger.info("Password recovery requested for %s", email.strip().lower())
        return True

    # ── Profile ────────────────────────────────────────────────────
    async def lookup(self, user_id: str) -> User | None:
        await self._users.load()
        user = self._users.get(user_id)
        return user.model_copy() if user else None

    async def update_profile(self, user_id: str, fields: dict[str, Any] | ProfileUpdate) -> User:
        if isinstance(fields, ProfileUpdate):
            fields = fields.model_dump(exclude_unset=True, exclude_none=True)

        rejected = set(fields) - _EDITABLE_FIELDS
        if rejected:
            raise ValidationFailure(f"Cannot update field(s): {', '.join(sorted(rejected))}")

        changes = dict(fields)
        if "password" in changes:
            changes["password"] = get_password_hash(changes["password"])

        async with self._users.editing() as users:
            current = users.get(user_id)
            if current is None:
                raise NotFound("User not found")
            updated = users.replace(User.model_validate({**current.model_dump(), **changes}))

        logger.info("Updated profile %s: %s", user_id, sorted(set(changes) - {"password"}))
        if self.session.user is not None and self.session.user.id == user_id:
            await self._start(updated)
        return updated.model_copy()

    async def complete_tour(self, user_id: str) -> User:
        return await self.update_profile(user_id, {"has_completed_tour": True})

    async def subscribe(self, user_id: str, plan: SubscriptionPlan) -> User:
        """Simulated checkout: the plan switches immediately."""
        user = await self.update_profile(
            user_id, {"subscription_plan": plan, "subscription_active": True}
        )
        logger.info("User %s subscribed to %s (simulated checkout)", user_id, user.subscription_plan.value)
        return user
