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
"""Role -> default permission set, and the role management hierarchy."""

from __future__ import annotations

from mvnodesk.domain.models import UserRole

DEFAULT_PERMISSIONS: dict[UserRole, tuple[str, ...]] = {
    UserRole.SUPERADMIN: (
        "users.read", "users.write", "users.delete",
        "sims.read", "sims.write", "sims.delete",
        "customers.read", "customers.write", "customers.delete",
        "tickets.read", "tickets.write", "tickets.assign",
        "balance.read", "balance.write", "balance.transfer",
        "reports.read", "reports.generate", "reports.export",
        "settings.read", "settings.write",
        "webhooks.read", "webhooks.write",
        "warehouse.read", "warehouse.write",
        "billing.read", "billing.write",
        "plans.read", "plans.write",
    ),
    UserRole.ADMIN: (
        "users.read", "users.write",
        "sims.read", "sims.write",
        "customers.read", "customers.write",
        "tickets.read", "tickets.write", "tickets.assign",
        "balance.read", "balance.write", "balance.transfer",
        "reports.read", "reports.generate",
        "warehouse.read", "warehouse.write",
        "billing.read",
        "plans.read", "plans.write",
    ),
    UserRole.GERENTE: (
        "users.read",
        "sims.read", "sims.write",
        "customers.read", "customers.write",
        "tickets.read", "tickets.write",
        "balance.read", "balance.transfer",
        "reports.read", "reports.generate",
        "warehouse.read",
        "plans.read",
    ),
    UserRole.OPERATOR: (
        "sims.read", "sims.write",
        "customers.read", "customers.write",
        "tickets.read", "tickets.write",
        "balance.read",
        "activations.read", "activations.write",
        "recharges.read", "recharges.write",
    ),
    UserRole.SUBDISTRIBUTOR: (
        "sims.read",
        "customers.read", "customers.write",
        "tickets.read", "tickets.write",
        "balance.read",
        "activations.read", "activations.write",
        "recharges.read", "recharges.write",
    ),
    UserRole.VENDOR: (
        "customers.read", "customers.write",
        "tickets.read", "tickets.write",
        "balance.read",
        "activations.read", "activations.write",
        "recharges.read", "recharges.write",
    ),
}

# Ordered from most to least privileged; a role manages itself and everything below it.
_ROLE_ORDER: tuple[UserRole, ...] = (
    UserRole.SUPERADMIN,
    UserRole.ADMIN,
    UserRole.GERENTE,
    UserRole.OPERATOR,
    UserRole.SUBDISTRIBUTOR,
    UserRole.VENDOR,
)


def default_permissions(role: UserRole | str) -> list[str]:
    return list(DEFAULT_PERMISSIONS[UserRole(role)])


def can_manage(actor_role: UserRole | str, target_role: UserRole | str) -> bool:
    return _ROLE_ORDER.index(UserRole(actor_role)) <= _ROLE_ORDER.index(UserRole(target_role))


def has_permission(role: UserRole | str, permissions: list[str], permission: str) -> bool:
    """Superadmins pass every check; everyone else needs the permission listed."""
    if UserRole(role) is UserRole.SUPERADMIN:
        return True
    return permission in permissions
