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
"""Support tickets with an append-only comment thread."""

from __future__ import annotations

from typing import Any

import structlog

from mvnodesk.access.facade import DataAccessFacade
from mvnodesk.core.clock import utcnow
from mvnodesk.domain.models import Ticket, TicketComment, TicketPriority, TicketStatus
from mvnodesk.domain.validation import coerce_enum, require_fields
from mvnodesk.kernel.exceptions import InvalidStateException, ResourceNotFoundException
from mvnodesk.query.entity_query import QueryOptions
from mvnodesk.services.base import EntityService
from mvnodesk.services.notifications import NotificationService

logger = structlog.get_logger(__name__)


class TicketService(EntityService[Ticket]):
    ttl = 1800

    def __init__(self, facade: DataAccessFacade, notifications: NotificationService | None = None) -> None:
        super().__init__(facade)
        self._notifications = notifications

    async def _notify_assignee(self, ticket: Ticket) -> None:
        if self._notifications is None or not ticket.assigned_to:
            return
        await self._notifications.send(
            ticket.assigned_to,
            title="Ticket assigned",
            message=f"Ticket '{ticket.title}' was assigned to you",
            type="ticket",
            metadata={"ticket_id": ticket.id, "priority": ticket.priority},
        )

    async def create(self, data: dict[str, Any], created_by: str | None = None) -> Ticket:
        payload = {**data, "created_by": created_by or data.get("created_by")}
        require_fields(payload, "title", "description", "category", "priority", "created_by")
        ticket = await self._insert({**payload, "status": TicketStatus.OPEN, "comments": []})
        await self._notify_assignee(ticket)
        return ticket

    async def list_tickets(
        self,
        status: TicketStatus | str | None = None,
        priority: TicketPriority | str | None = None,
        assigned_to: str | None = None,
        created_by: str | None = None,
    ) -> list[Ticket]:
        """Tickets matching the filters, newest first. Unfiltered is cached as ``tickets:all``."""
        query = self.query().where(
            status=status, priority=priority, assigned_to=assigned_to, created_by=created_by
        )
        options = QueryOptions(sort=(("created_at", -1),))
        if query.to_filter():
            return await self.find(query, options)
        return await self.find_all_cached(options)

    async def update_status(self, id: str, status: TicketStatus | str) -> Ticket:
        """Move a ticket to *status*. Closed tickets stay closed."""
        target = coerce_enum(TicketStatus, status, "status")
        ticket = await self.require(id, fresh=True)
        if ticket.status == TicketStatus.CLOSED and target != TicketStatus.CLOSED:
            raise InvalidStateException(
                f"Ticket '{id}' is closed",
                code="TICKET_CLOSED",
                context={"id": id, "to": str(target)},
            )
        return await self.update(id, {"status": target})

    async def assign(self, id: str, user_id: str) -> Ticket:
        ticket = await self.update(id, {"assigned_to": user_id})
        await self._notify_assignee(ticket)
        return ticket

    async def add_comment(self, id: str, author: str, message: str) -> TicketComment:
        """Append a comment stamped with its author and the current time."""
        require_fields({"author": author, "message": message}, "author", "message")
        comment = TicketComment(author=author, message=message, timestamp=utcnow())
        if not await self._facade.append_to(self.collection, id, "comments", comment.model_dump()):
            raise ResourceNotFoundException(
                f"Ticket '{id}' not found",
                code="NOT_FOUND",
                context={"collection": self.collection, "id": id},
            )
        logger.info("ticket_commented", id=id, author=author)
        return comment
