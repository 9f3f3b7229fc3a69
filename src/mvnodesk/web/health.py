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
"""Starlette health route for operators and load balancers."""

from __future__ import annotations

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from mvnodesk.health.health import DOWN
from mvnodesk.health.prober import Availability, AvailabilityProber


def make_health_route(prober: AvailabilityProber, path: str = "/health") -> Route:
    """``GET /health``: 200 while the store answers (even without cache), else 503."""

    async def handler(request: Request) -> JSONResponse:
        result = await prober.health()
        body = result.to_dict()
        body["availability"] = str(
            Availability.of(
                cache_healthy=result.components["cache"].is_up,
                store_healthy=result.components["store"].is_up,
            )
        )
        return JSONResponse(body, status_code=503 if result.status == DOWN else 200)

    return Route(path, handler, methods=["GET"])


def create_health_app(prober: AvailabilityProber) -> Starlette:
    return Starlette(routes=[make_health_route(prober)])
