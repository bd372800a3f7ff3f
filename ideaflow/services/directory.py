"""
User directory: the admin-facing view over the ``users`` collection.
"""

from __future__ import annotations

import logging

from ideaflow.core.exceptions import DuplicateEmail, NotFound, SelfModification
from ideaflow.core.security import get_password_hash
from ideaflow.schemas.user import DirectoryCounts, SubscriptionPlan, User, UserSortKey
from ideaflow.store.collection import Collection
from ideaflow.store.persistent import PersistentStore, StoreKey

logger = logging.getLogger(__name__)


def _sort_users(users: list[User], sort: UserSortKey) -> list[User]:
    if sort == UserSortKey.USERNAME:
        return sorted(users, key=lambda u: u.username.casefold())
    if sort == UserSortKey.JOINED_AT:
        return sorted(users, key=lambda u: u.joined_at, reverse=True)
    # Plain string order on the plan name: Enterprise < Free < Pro
    return sorted(users, key=lambda u: u.subscription_plan.value)


class UserDirectory:
    def __init__(self, store: PersistentStore) -> None:
        self._users: Collection[User] = Collection(store, StoreKey.USERS, User)

    async def list(
        self,
        query: str = "",
        sort: UserSortKey | str = UserSortKey.JOINED_AT,
    ) -> list[User]:
        await self._users.load()
        needle = query.strip().lower()
        matches = self._users.filter(
            lambda u: needle in u.username.lower() or needle in u.email.lower()
        )
        return [u.model_copy() for u in _sort_users(matches, UserSortKey(sort))]

    async def get(self, user_id: str) -> User:
        await self._users.load()
        user = self._users.get(user_id)
        if user is None:
            raise NotFound("User not found")
        return user.model_copy()

    async def get_by_email(self, email: str) -> User | None:
        await self._users.load()
        email = email.strip().lower()
        user = self._users.find(lambda u: u.email.lower() == email)
        return user.model_copy() if user else None

    async def create(
        self,
        username: str,
        email: str,
        password: str,
        is_admin: bool = False,
        subscription_plan: SubscriptionPlan = SubscriptionPlan.FREE,
    ) -> User:
        email = email.strip().lower()
        async with self._users.editing() as users:
            if users.find(lambda u: u.email.lower() == email):
                raise DuplicateEmail("A user with this email already exists.")
            user = users.prepend(
                User(
                    id=users.new_id(),
                    email=email,
                    username=username.strip(),
                    password=get_password_hash(password),
                    is_admin=is_admin,
                    subscription_plan=subscription_plan,
                    subscription_active=True,
                    has_completed_tour=False,
                )
            )
        logger.info("Created user %s (%s, admin=%s)", user.id, email, is_admin)
        return user.model_copy()

    async def toggle_admin(self, target_id: str, acting_user_id: str) -> User:
        if target_id == acting_user_id:
            raise SelfModification("You cannot remove your own admin status.")
        async with self._users.editing() as users:
            user = users.get(target_id)
            if user is None:
                raise NotFound("User not found")
            user = users.replace(user.model_copy(update={"is_admin": not user.is_admin}))
        logger.info("User %s set admin=%s by %s", target_id, user.is_admin, acting_user_id)
        return user.model_copy()

    async def set_plan(self, target_id: str, plan: SubscriptionPlan) -> User:
        async with self._users.editing() as users:
            user = users.get(target_id)
            if user is None:
                raise NotFound("User not found")
            user = users.replace(
                user.model_copy(
                    update={"subscription_plan": SubscriptionPlan(plan), "subscription_active": True}
                )
            )
        logger.info("User %s moved to plan %s", target_id, user.subscription_plan.value)
        return user.model_copy()

    async def delete(self, target_id: str, acting_user_id: str) -> None:
        """Remove a user. Their ideas stay in storage, owned by nobody."""
        if target_id == acting_user_id:
            raise SelfModification("You cannot delete your own account.")
        async with self._users.editing() as users:
            if users.pop(target_id) is None:
                raise NotFound("User not found")
        logger.info("Deleted user %s by %s", target_id, acting_user_id)

    async def counts(self) -> DirectoryCounts:
        await self._users.load()
        users = list(self._users)
        return DirectoryCounts(
            total=len(users),
            admins=sum(1 for u in users if u.is_admin),
            pro=sum(1 for u in users if u.subscription_plan == SubscriptionPlan.PRO),
            enterprise=sum(1 for u in users if u.subscription_plan == SubscriptionPlan.ENTERPRISE),
        )
