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
"""Activations, recharges, balance transfers and suspensions.

Every operation records a :class:`Transaction`. Completed transactions with
a positive amount are added to the customer's ``total_spent``. A transfer
records two entries: a negative one for the sender and a positive one for
the recipient.
"""

from __future__ import annotations

from typing import Any

import structlog

from mvnodesk.access.facade import DataAccessFacade
from mvnodesk.cache import keys
from mvnodesk.core.clock import utcnow
from mvnodesk.domain.models import Transaction, TransactionStatus, TransactionType
from mvnodesk.domain.validation import require_fields
from mvnodesk.kernel.exceptions import ValidationException
from mvnodesk.query.entity_query import QueryOptions
from mvnodesk.query.filter import FilterOperator
from mvnodesk.services.base import EntityService
from mvnodesk.services.customers import CustomerService
from mvnodesk.services.sims import SimService

logger = structlog.get_logger(__name__)

HISTORY_TTL_SECONDS = 900


class TransactionService(EntityService[Transaction]):
    ttl = 3600

    def __init__(self, facade: DataAccessFacade, customers: CustomerService, sims: SimService) -> None:
        super().__init__(facade)
        self._customers = customers
        self._sims = sims

    async def record(self, data: dict[str, Any]) -> Transaction:
        require_fields(data, "type", "customer_id", "operator_id")
        if data.get("amount") is None:
            raise ValidationException("Missing required fields: amount", code="MISSING_FIELDS", context={"missing": ["amount"]})
        transaction = await self._insert(data)
        if transaction.status == TransactionStatus.COMPLETED and transaction.amount > 0:
            await self._customers.adjust_total_spent(transaction.customer_id, transaction.amount)
        logger.info(
            "transaction_recorded",
            id=transaction.id,
            type=str(transaction.type),
            amount=transaction.amount,
        )
        return transaction

    async def activation(
        self,
        customer_id: str,
        sim_id: str,
        plan_id: str,
        operator_id: str,
        amount: float = 0.0,
    ) -> Transaction:
        """Activate a SIM for a customer on a plan and record it."""
        require_fields(
            {"customer_id": customer_id, "sim_id": sim_id, "plan_id": plan_id, "operator_id": operator_id},
            "customer_id", "sim_id", "plan_id", "operator_id",
        )
        await self._customers.require(customer_id, fresh=True)
        await self._sims.activate(sim_id, customer_id, plan_id)
        transaction = await self.record({
            "type": TransactionType.ACTIVATION,
            "customer_id": customer_id,
            "sim_id": sim_id,
            "amount": amount,
            "operator_id": operator_id,
            "status": TransactionStatus.COMPLETED,
            "description": f"Activation of SIM {sim_id}",
            "metadata": {"plan_id": plan_id, "activation_date": utcnow()},
        })
        await self._customers.touch(customer_id)
        return transaction

    async def recharge(
        self,
        customer_id: str,
        amount: float,
        operator_id: str,
        recharge_type: str = "balance",
    ) -> Transaction:
        if amount <= 0:
            raise ValidationException("Recharge amount must be positive", code="INVALID_AMOUNT", context={"amount": amount})
        await self._customers.require(customer_id, fresh=True)
        return await self.record({
            "type": TransactionType.RECHARGE,
            "customer_id": customer_id,
            "amount": amount,
            "operator_id": operator_id,
            "status": TransactionStatus.COMPLETED,
            "description": f"Recharge for customer {customer_id}",
            "metadata": {"recharge_type": recharge_type, "recharge_date": utcnow()},
        })

    async def transfer(
        self,
        from_user_id: str,
        to_user_id: str,
        amount: float,
        reference: str | None = None,
        notes: str | None = None,
    ) -> tuple[Transaction, Transaction]:
        """Move balance between two users. Returns (sender entry, recipient entry)."""
        require_fields({"from_user_id": from_user_id, "to_user_id": to_user_id}, "from_user_id", "to_user_id")
        if amount <= 0:
            raise ValidationException("Transfer amount must be positive", code="INVALID_AMOUNT", context={"amount": amount})
        if from_user_id == to_user_id:
            raise ValidationException("Cannot transfer to the same user", code="SAME_PARTY")
        common = {
            "type": TransactionType.TRANSFER,
            "operator_id": from_user_id,
            "status": TransactionStatus.COMPLETED,
            "reference": reference,
        }
        sender = await self._insert({
            **common,
            "customer_id": from_user_id,
            "amount": -amount,
            "description": f"Transfer to {to_user_id}",
            "metadata": {"transfer_type": "outgoing", "recipient_id": to_user_id, "notes": notes},
        })
        recipient = await self._insert({
            **common,
            "customer_id": to_user_id,
            "amount": amount,
            "description": f"Transfer from {from_user_id}",
            "metadata": {"transfer_type": "incoming", "sender_id": from_user_id, "notes": notes},
        })
        logger.info("balance_transferred", sender=from_user_id, recipient=to_user_id, amount=amount)
        return sender, recipient

    async def suspension(self, customer_id: str, sim_id: str, operator_id: str, reason: str | None = None) -> Transaction:
        await self._sims.suspend(sim_id)
        return await self.record({
            "type": TransactionType.SUSPENSION,
            "customer_id": customer_id,
            "sim_id": sim_id,
            "amount": 0.0,
            "operator_id": operator_id,
            "status": TransactionStatus.COMPLETED,
            "description": f"Suspension of SIM {sim_id}",
            "metadata": {"reason": reason},
        })

    async def history(self, user_id: str, limit: int = 100) -> list[Transaction]:
        """Transactions where the user is operator or party, newest first.

        Cached under ``transactions:<user_id>``; recording a transaction for
        that user drops the key.
        """
        query = self.query().matching(
            FilterOperator.eq("operator_id", user_id) | FilterOperator.eq("customer_id", user_id)
        )

        async def load() -> list[dict[str, Any]]:
            return await self._facade.query_entities(
                self.collection, query, QueryOptions(sort=(("created_at", -1),), limit=limit)
            )

        documents = await self._facade.get_cached(keys.transactions_key(user_id), load, HISTORY_TTL_SECONDS)
        return [self._to_model(doc) for doc in documents]
