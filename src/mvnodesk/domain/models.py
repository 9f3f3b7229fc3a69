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
"""Entity models stored in the primary store.

The models describe the shape of each collection's documents and give the
typed query builder a list of queryable fields. Documents travel through the
store and cache as plain dicts; ``to_document`` produces the dict for an
insert.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field


class UserRole(StrEnum):
    SUPERADMIN = "superadmin"
    ADMIN = "admin"
    GERENTE = "gerente"
    OPERATOR = "operator"
    SUBDISTRIBUTOR = "subdistributor"
    VENDOR = "vendor"


class CustomerStatus(StrEnum):
    ACTIVE = "active"
    SUSPENDED = "suspended"
    INACTIVE = "inactive"


class SimStatus(StrEnum):
    AVAILABLE = "available"
    ACTIVE = "active"
    SUSPENDED = "suspended"
    INACTIVE = "inactive"


class TransactionType(StrEnum):
    ACTIVATION = "activation"
    RECHARGE = "recharge"
    TRANSFER = "transfer"
    SUSPENSION = "suspension"


class TransactionStatus(StrEnum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class TicketCategory(StrEnum):
    TECHNICAL = "technical"
    COMMERCIAL = "commercial"
    BILLING = "billing"
    GENERAL = "general"


class TicketPriority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class TicketStatus(StrEnum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


class PlanType(StrEnum):
    PRINCIPAL = "principal"
    COMPLEMENTARY = "complementary"


class RecordStatus(StrEnum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class Entity(BaseModel):
    """Fields shared by every stored entity.

    ``id``, ``created_at`` and ``updated_at`` are assigned by the store.
    """

    model_config = ConfigDict(use_enum_values=True, extra="allow")

    collection: ClassVar[str] = ""
    cache_prefix: ClassVar[str] = ""

    id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def queryable_fields(cls) -> frozenset[str]:
        return frozenset(cls.model_fields)

    def to_document(self) -> dict[str, Any]:
        """Dict for insertion: store-managed fields and unset optionals dropped."""
        return self.model_dump(exclude={"id", "created_at", "updated_at"}, exclude_none=True)


class User(Entity):
    collection: ClassVar[str] = "users"
    cache_prefix: ClassVar[str] = "user"

    name: str
    email: str
    role: UserRole
    permissions: list[str] = Field(default_factory=list)
    department: str | None = None
    supervisor: str | None = None
    avatar: str | None = None
    is_active: bool = True
    last_login: datetime | None = None


class Customer(Entity):
    collection: ClassVar[str] = "customers"
    cache_prefix: ClassVar[str] = "customer"

    name: str
    email: str
    phone: str
    address: str | None = None
    created_by: str | None = None
    status: CustomerStatus = CustomerStatus.ACTIVE
    total_spent: float = 0.0
    last_activity: datetime | None = None
    notes: str | None = None


class Sim(Entity):
    collection: ClassVar[str] = "sims"
    cache_prefix: ClassVar[str] = "sim"

    iccid: str
    msisdn: str
    operator: str
    status: SimStatus = SimStatus.AVAILABLE
    customer_id: str | None = None
    plan_id: str | None = None
    activation_date: datetime | None = None
    expiry_date: datetime | None = None
    warehouse_id: str | None = None
    created_by: str | None = None


class Transaction(Entity):
    collection: ClassVar[str] = "transactions"
    cache_prefix: ClassVar[str] = "transaction"

    type: TransactionType
    customer_id: str
    sim_id: str | None = None
    amount: float
    commission: float = 0.0
    status: TransactionStatus = TransactionStatus.PENDING
    operator_id: str
    reference: str | None = None
    description: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class TicketComment(BaseModel):
    author: str
    message: str
    timestamp: datetime


class Ticket(Entity):
    collection: ClassVar[str] = "tickets"
    cache_prefix: ClassVar[str] = "ticket"

    title: str
    description: str
    category: TicketCategory
    priority: TicketPriority
    status: TicketStatus = TicketStatus.OPEN
    customer_id: str | None = None
    created_by: str
    assigned_to: str | None = None
    comments: list[TicketComment] = Field(default_factory=list)


class Plan(Entity):
    collection: ClassVar[str] = "plans"
    cache_prefix: ClassVar[str] = "plan"

    name: str
    type: PlanType
    data: str
    minutes: str
    sms: str
    validity: str
    base_cost: float
    retail_price: float
    status: RecordStatus = RecordStatus.ACTIVE
    description: str | None = None
    created_by: str | None = None


class Warehouse(Entity):
    collection: ClassVar[str] = "warehouses"
    cache_prefix: ClassVar[str] = "warehouse"

    name: str
    location: str
    manager: str
    total_sims: int = 0
    available_sims: int = 0
    assigned_sims: int = 0
    reserved_sims: int = 0
    status: RecordStatus = RecordStatus.ACTIVE


class Notification(Entity):
    collection: ClassVar[str] = "notifications"
    cache_prefix: ClassVar[str] = "notification"

    user_id: str
    title: str
    message: str
    type: str = "info"
    read: bool = False
    read_at: datetime | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


ENTITY_MODELS: dict[str, type[Entity]] = {
    model.collection: model
    for model in (User, Customer, Sim, Transaction, Ticket, Plan, Warehouse, Notification)
}
