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
"""Typed configuration properties for the store, cache and logging subsystems."""

from __future__ import annotations

from dataclasses import dataclass, field

from mvnodesk.core.config import config_properties


@config_properties(prefix="mvnodesk.store")
@dataclass
class StoreProperties:
    """Primary store connection settings (mvnodesk.store.*)."""

    uri: str = "mongodb://localhost:27017"
    database: str = "omv_database"
    max_pool_size: int = 10
    server_selection_timeout_ms: int = 10000
    socket_timeout_ms: int = 45000
    command_timeout_seconds: float = 10.0


@config_properties(prefix="mvnodesk.cache")
@dataclass
class CacheProperties:
    """Ephemeral cache settings (mvnodesk.cache.*).

    ``probe_memo_seconds`` of 0 re-probes availability on every facade call;
    a positive value lets the classification be up to that many seconds stale.
    ``sweep_interval_seconds`` of 0 leaves physical cleanup of expired
    store-backed entries to the TTL index.
    """

    enabled: bool = True
    url: str = "redis://localhost:6379/0"
    command_timeout_seconds: float = 5.0
    probe_timeout_seconds: float = 2.0
    probe_memo_seconds: float = 0.0
    default_ttl_seconds: int = 3600
    sweep_interval_seconds: float = 0.0


@config_properties(prefix="mvnodesk.logging")
@dataclass
class LoggingProperties:
    """Logging settings (mvnodesk.logging.*)."""

    format: str = "console"
    level: dict = field(default_factory=lambda: {"root": "INFO"})
