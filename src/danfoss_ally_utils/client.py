#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Danfoss Ally Client Module

This module provides the Client class for authenticating against the Danfoss
Ally API, listing the account's thermostats and reporting their room
temperatures. It tracks authentication as an explicit two-state value
(Unauthenticated / Authenticated) and offers a polling mode that renews the
token once it has expired.

License: MIT
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Union

import requests

from .config import Config
from .exceptions import AuthenticationError, DecodeError, StateError, TransportError
from .models import Device, parse_devices
from .oauth import AccessToken

logger = logging.getLogger(__name__)

Sink = Callable[[str], None]

# 设备接口认证失败的状态码
AUTH_REJECTED_STATUSES = (401, 403)

# 1. 认证状态 (Authentication State)
@dataclass(frozen=True)
class Unauthenticated:
    """尚未获取令牌"""

@dataclass(frozen=True)
class Authenticated:
    """已持有令牌，只有该状态能构造设备请求"""
    token: AccessToken

AuthState = Union[Unauthenticated, Authenticated]

# 2. 主类 (Main Class)
class Client:
    """
    Danfoss Ally API 客户端。
    使用方式：
        client = Client(Config.from_env())
        client.get_token()
        client.get_devices()
        client.print_room_temperatures()
    """

    def __init__(self, config: Config, session: Optional[requests.Session] = None):
        self.config = config
        self._session = session if session is not None else requests.Session()
        self._state: AuthState = Unauthenticated()
        self._devices: List[Device] = []
        # 保护令牌写入，允许多个线程共享同一个客户端
        self._token_lock = threading.Lock()

    @classmethod
    def from_env(cls, session: Optional[requests.Session] = None) -> "Client":
        """
        从环境变量构建客户端。

        Raises:
            ConfigurationError: DANFOSS_API_KEY 或 DANFOSS_API_SECRET 缺失或为空。
        """
        return cls(Config.from_env(), session)

    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def is_authenticated(self) -> bool:
        return isinstance(self._state, Authenticated)

    @property
    def token(self) -> Optional[AccessToken]:
        if isinstance(self._state, Authenticated):
            return self._state.token
        return None

    @property
    def devices(self) -> List[Device]:
        return list(self._devices)

    def get_token(self) -> AccessToken:
        """
        用 API key/secret 换取访问令牌并保存。

        Returns:
            AccessToken: 新获取的令牌。

        Raises:
            AuthenticationError: 非 2xx 状态码或响应无法解析，状态保持不变。
            TransportError: 网络错误或超时。
        """
        with self._token_lock:
            return self._fetch_token()

    def ensure_token(self) -> AccessToken:
        """未认证或令牌已过期时重新获取，否则直接返回当前令牌"""
        with self._token_lock:
            # 在锁内重新检查，避免多个线程重复刷新
            state = self._state
            if isinstance(state, Authenticated) and not state.token.is_expired():
                return state.token
            if isinstance(state, Authenticated):
                logger.info("访问令牌已过期，重新获取")
            return self._fetch_token()

    def get_devices(self) -> List[Device]:
        """
        获取设备列表并保存。
        令牌被拒绝时不会自动刷新，需要调用方重新调用 get_token。

        Returns:
            List[Device]: 设备列表，顺序与服务端一致。

        Raises:
            StateError: 尚未成功调用 get_token。
            AuthenticationError: 令牌被拒绝（401/403）。
            TransportError: 网络错误、超时或其他非 2xx 状态码。
            DecodeError: 响应无法解析。
        """
        state = self._state
        if not isinstance(state, Authenticated):
            raise StateError("not authenticated", operation="get_devices")

        payload = self._request(
            "GET",
            self.config.devices_url,
            headers={"Accept": "application/json", "Authorization": state.token.authorization}
        )
        devices = parse_devices(payload)

        # 解析成功后才替换已保存的设备列表
        self._devices = devices
        logger.debug("获取到 %d 台设备", len(devices))
        return self.devices

    def print_room_temperatures(self, sink: Optional[Sink] = None) -> None:
        """
        逐台输出设备室温，每台有室温数据的设备输出一行 "<name>: <value>"。

        Args:
            sink: 接收每一行文本的可调用对象，默认按配置的日志级别写入日志。
        """
        if sink is None:
            sink = self._log_sink

        if not self._devices:
            logger.info("no devices")
            return

        for device in self._devices:
            if not device.has_room_temperature:
                continue
            temperature = device.room_temperature
            # 有室温字段但值为 null 时同样输出一行
            sink(f"{device.name}: {'null' if temperature is None else temperature}")

    def poll_once(self, sink: Optional[Sink] = None) -> List[Device]:
        """按需刷新令牌，拉取设备并输出室温"""
        self.ensure_token()
        devices = self.get_devices()
        self.print_room_temperatures(sink)
        return devices

    def run(
        self,
        iterations: Optional[int] = None,
        sink: Optional[Sink] = None,
        stop: Optional[threading.Event] = None
    ) -> None:
        """
        轮询模式：每隔 polling_interval 秒执行一次 poll_once。
        iterations 为 None 时一直运行，直到 stop 被设置；任何错误都会向上抛出。
        """
        if stop is None:
            stop = threading.Event()
        count = 0
        while not stop.is_set() and (iterations is None or count < iterations):
            if count and stop.wait(self.config.polling_interval):
                break
            self.poll_once(sink)
            count += 1

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _fetch_token(self) -> AccessToken:
        """调用方必须持有 _token_lock"""
        token = AccessToken(self.config, self._session)
        self._state = Authenticated(token)
        logger.info("认证成功")
        return token

    def _log_sink(self, line: str) -> None:
        logger.log(self.config.level, line)

    def _request(self, method: str, url: str, **kwargs) -> Dict[str, Any]:
        """
        执行HTTP请求的核心方法。
        统一超时，并把网络、状态码和解析错误转换为客户端异常。
        """
        kwargs.setdefault("timeout", self.config.timeout)

        try:
            response = self._session.request(method, url, **kwargs)
        except requests.Timeout as e:
            raise TransportError("TIMEOUT", f"请求超时: {e}", "网络错误")
        except requests.RequestException as e:
            raise TransportError("NETWORK", f"网络请求失败: {e}", "网络错误")

        if response.status_code in AUTH_REJECTED_STATUSES:
            raise AuthenticationError(str(response.status_code), "访问令牌被拒绝", "请重新调用 get_token")
        if not 200 <= response.status_code < 300:
            raise TransportError(str(response.status_code), f"HTTP {response.status_code}", "服务端错误")

        try:
            return response.json()
        except ValueError:
            raise DecodeError("INVALID_JSON", "响应不是合法的 JSON", "无法解析响应数据")
