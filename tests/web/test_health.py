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
"""Tests for the GET /health route."""

from __future__ import annotations

import pytest
from starlette.testclient import TestClient

from mvnodesk.web.health import create_health_app


class TestHealthEndpoint:
    def test_all_up(self, prober):
        client = TestClient(create_health_app(prober))

        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "UP"
        assert body["availability"] == "both"
        assert body["components"]["store"]["status"] == "UP"

    def test_cache_down_is_degraded_but_serving(self, prober, cache_indicator):
        cache_indicator.up = False
        client = TestClient(create_health_app(prober))

        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "DEGRADED"
        assert response.json()["availability"] == "store-only"

    @pytest.mark.parametrize("cache_up", [True, False])
    def test_store_down_is_503(self, prober, store_indicator, cache_indicator, cache_up):
        store_indicator.up = False
        cache_indicator.up = cache_up
        client = TestClient(create_health_app(prober))

        response = client.get("/health")

        assert response.status_code == 503
        assert response.json()["status"] == "DOWN"
        assert response.json()["availability"] == ("cache-only" if cache_up else "none")

    def test_post_not_allowed(self, prober):
        client = TestClient(create_health_app(prober))

        assert client.post("/health").status_code == 405
