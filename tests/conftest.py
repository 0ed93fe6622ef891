#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Shared pytest fixtures for the Danfoss Ally client tests.

Unit tests never touch the network: the client receives a Mock session whose
post/request methods return hand-built requests.Response objects.

License: MIT
"""

import copy
import json
from typing import Any, Callable
from unittest.mock import Mock

import pytest
import requests

from danfoss_ally_utils.config import Config

TOKEN_PAYLOAD = {
    "access_token": "TEST_ACCESS_TOKEN",
    "token_type": "Bearer",
    "expires_in": "3599"
}

DEVICES_PAYLOAD = {
    "result": [
        {
            "active_time": 1650000000,
            "create_time": 1640000000,
            "id": "bf1a2b3c4d5e6f",
            "name": "Living room",
            "online": True,
            "status": [
                {"code": "mode", "value": "manual"},
                {"code": "temp_current", "value": 215}
            ],
            "sub": True,
            "time_zone": "+01:00",
            "update_time": 1660000000,
            "device_type": "Danfoss Ally™ Radiator Thermostat"
        },
        {
            "id": "bf9f8e7d6c5b4a",
            "name": "Bedroom",
            "online": False,
            "status": [{"code": "va_temperature", "value": 189}],
            "device_type": "Danfoss Ally™ Room Sensor"
        }
    ],
    "t": 1660000001
}


def make_response(payload: Any = None, *, status_code: int = 200, body: bytes = None) -> requests.Response:
    """构造一个 requests.Response，body 优先于 payload"""
    resp = requests.Response()
    resp.status_code = status_code
    resp.headers["Content-Type"] = "application/json"
    resp._content = body if body is not None else json.dumps(payload).encode("utf-8")
    resp.encoding = "utf-8"
    resp.url = "https://api.danfoss.com/"
    return resp


@pytest.fixture
def config() -> Config:
    return Config(api_key="test-key", api_secret="test-secret", timeout=5.0, polling_interval=1.0)


@pytest.fixture
def token_payload() -> dict:
    return copy.deepcopy(TOKEN_PAYLOAD)


@pytest.fixture
def devices_payload() -> dict:
    return copy.deepcopy(DEVICES_PAYLOAD)


@pytest.fixture
def response_factory() -> Callable[..., requests.Response]:
    return make_response


@pytest.fixture
def session() -> Mock:
    """默认令牌接口和设备接口都返回成功响应"""
    s = Mock()
    s.post.return_value = make_response(TOKEN_PAYLOAD)
    s.request.return_value = make_response(DEVICES_PAYLOAD)
    return s
