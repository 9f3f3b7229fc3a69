# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""User management: roles, permission sets and the management hierarchy."""

from __future__ import annotations

from typing import Any

import structlog

from mvnodesk.cache import keys
from mvnodesk.core.clock import utcnow
from mvnodesk.domain.models import User, UserRole
from mvnodesk.domain.permissions import can_manage, default_permissions, has_permission
from mvnodesk.domain.validation import coerce_enum, require_fields
from mvnodesk.kernel.exceptions import ConflictException
from mvnodesk.services.base import EntityService

logger = structlog.get_logger(__name__)


class UserService(EntityService[User]):
    ttl = 3600

    @staticmethod
    def _role(value: Any) -> UserRole:
        return coerce_enum(UserRole, value, "role")

    async def _ensure_email_free(self, email: str, exclude_id: str | None = None) -> None:
        existing = await self.find(self.query().where(email=email))
        if any(user.id != exclude_id for user in existing):
            raise ConflictException(
                f"Email '{email}' is already registered",
                code="EMAIL_TAKEN",
                context={"email": email},
            )

    async def create(self, data: dict[str, Any]) -> User:
        """Create a user. Without explicit permissions the role's defaults apply."""
        require_fields(data, "name", "email", "role")
        role = self._role(data["role"])
        await self._ensure_email_free(data["email"])
        payload = {**data, "role": role, "is_active": data.get("is_active", True)}
        payload.setdefault("permissions", default_permissions(role))
        user = await self._insert(payload)
        logger.info("user_created", id=user.id, role=str(role))
        return user

    async def list_users(self, role: UserRole | str | None = None, is_active: bool | None = None) -> list[User]:
        query = self.query().where(role=self._role(role).value if role is not None else None, is_active=is_active)
        return await self.find(query)

    async def update(self, id: str, patch: dict[str, Any], **kwargs: Any) -> User:
        """Update a user. A role change without explicit permissions resets them."""
        changes = dict(patch)
        if "role" in changes:
            role = self._role(changes["role"])
            changes["role"] = role
            changes.setdefault("permissions", default_permissions(role))
        if "email" in changes:
            await self._ensure_email_free(changes["email"], exclude_id=id)
        return await super().update(id, changes, **kwargs)

    async def delete(self, id: str) -> bool:
        """Hard delete. Users are the only entity removed rather than flagged."""
        return await self._facade.delete_entity(self.collection, id)

    async def record_login(self, id: str) -> User:
        return await self.update(id, {"last_login": utcnow()})

    async def permissions(self, id: str) -> list[str]:
        """Permission list of a user, cached under ``user:<id>:permissions``."""

        async def load() -> list[str]:
            user = await self.require(id)
            return list(user.permissions)

        return await self._facade.get_cached(keys.user_permissions_key(id), load, self.ttl)

    async def has_permission(self, id: str, permission: str) -> bool:
        user = await self.require(id)
        return has_permission(user.role, await self.permissions(id), permission)

    async def can_manage(self, actor_id: str, target_id: str) -> bool:
        actor = await self.require(actor_id)
        target = await self.require(target_id)
        return can_manage(actor.role, target.role)
