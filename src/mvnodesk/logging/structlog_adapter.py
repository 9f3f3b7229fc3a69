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
"""StructlogAdapter: LoggingPort implementation backed by structlog.

Records are rendered as console lines or JSON. Two processors are specific
to this project:

* ``cache_backend`` is merged in from context while the data access facade
  serves a call, see :func:`bind_cache_backend`.
* Credentials in ``mongodb://`` and ``redis://`` URIs are masked, since
  driver errors quote the connection string verbatim.
"""

from __future__ import annotations

import logging
import re
import sys
from collections.abc import Iterator, MutableMapping
from contextlib import contextmanager
from typing import Any

import structlog

from mvnodesk.config.properties import LoggingProperties

# Drivers that log every pool checkout at DEBUG. Kept at WARNING unless a
# level is configured for them explicitly.
DRIVER_LOGGERS = ("pymongo", "motor", "redis")

_URI_CREDENTIALS = re.compile(r"(?P<scheme>(?:mongodb(?:\+srv)?|rediss?)://)[^/@\s]+@")


def mask_uri_credentials(_logger: Any, _method: str, event_dict: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
    for name, value in event_dict.items():
        if isinstance(value, str) and "://" in value:
            event_dict[name] = _URI_CREDENTIALS.sub(r"\g<scheme>***@", value)
    return event_dict


@contextmanager
def bind_cache_backend(backend: str) -> Iterator[None]:
    """Tag every record logged inside the block with ``cache_backend``."""
    with structlog.contextvars.bound_contextvars(cache_backend=str(backend)):
        yield


def build_processors(fmt: str) -> list[structlog.types.Processor]:
    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer() if fmt == "json" else structlog.dev.ConsoleRenderer()
    )
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.format_exc_info,
        mask_uri_credentials,
        renderer,
    ]


class StructlogAdapter:
    """Configures structlog and stdlib levels from :class:`LoggingProperties`."""

    def __init__(self) -> None:
        self._root_level = "INFO"
        self._format = "console"
        self._module_levels: dict[str, str] = {}

    @property
    def format(self) -> str:
        return self._format

    @property
    def root_level(self) -> str:
        return self._root_level

    def configure(self, properties: LoggingProperties) -> None:
        levels = {name: str(level).upper() for name, level in (properties.level or {}).items()}
        self._root_level = levels.pop("root", "INFO")
        self._format = str(properties.format).lower()
        self._module_levels = {name: "WARNING" for name in DRIVER_LOGGERS} | levels

        structlog.configure(
            processors=build_processors(self._format),
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )
        logging.basicConfig(
            format="%(message)s",
            stream=sys.stdout,
            level=getattr(logging, self._root_level, logging.INFO),
            force=True,
        )
        for name, level in self._module_levels.items():
            self.set_level(name, level)

    def get_logger(self, name: str) -> Any:
        return structlog.get_logger(name)

    def set_level(self, name: str, level: str) -> None:
        logging.getLogger(name).setLevel(getattr(logging, level.upper(), logging.INFO))
