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
"""Domain services. Every read and write goes through the data access facade."""

from mvnodesk.services.analytics import AnalyticsService
from mvnodesk.services.base import EntityService
from mvnodesk.services.customers import CustomerService
from mvnodesk.services.notifications import NotificationService
from mvnodesk.services.plans import PlanService
from mvnodesk.services.reports import ReportService
from mvnodesk.services.sims import SimService
from mvnodesk.services.tickets import TicketService
from mvnodesk.services.transactions import TransactionService
from mvnodesk.services.users import UserService
from mvnodesk.services.warehouses import WarehouseService

__all__ = [
    "AnalyticsService",
    "CustomerService",
    "EntityService",
    "NotificationService",
    "PlanService",
    "ReportService",
    "SimService",
    "TicketService",
    "TransactionService",
    "UserService",
    "WarehouseService",
]
