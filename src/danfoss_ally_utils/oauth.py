#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Danfoss Ally OAuth Module

This module provides token acquisition for the Danfoss Ally API. It performs
the OAuth2 client-credentials exchange (HTTP Basic auth with the API key and
secret) and wraps the resulting bearer token together with its expiry.

License: MIT
"""

import base64
import logging
import time
from typing import Optional, TypedDict, Union, cast

import requests

from .config import Config
from .exceptions import AuthenticationError, TransportError

logger = logging.getLogger(__name__)

# 1. 常量 (Constants)
GRANT_TYPE = "client_credentials"

# 已知的认证错误状态码及其说明
ERROR_STATUS_REMARKS = {
    400: "请求参数错误，检查 grant_type",
    401: "API key 或 API secret 不正确",
    403: "该应用无权访问 Ally API",
    429: "请求过于频繁"
}

# 2. 类型定义 (Type Definitions)
# 服务端返回的 expires_in 是字符串，例如 "3599"
class TokenResponse(TypedDict):
    access_token: str
    token_type: str
    expires_in: Union[str, int]

# 3. 辅助函数 (Helper Functions)
def basic_auth_header(api_key: str, api_secret: str) -> str:
    """构造 HTTP Basic 认证头"""
    raw = f"{api_key}:{api_secret}".encode("utf-8")
    return "Basic " + base64.b64encode(raw).decode("ascii")

def _parse_expires_in(value: object) -> int:
    if isinstance(value, bool):
        raise ValueError(f"expires_in 类型无效: {value!r}")
    expires_in = int(cast(Union[str, int], value))
    if expires_in < 0:
        raise ValueError(f"expires_in 不能为负数: {expires_in}")
    return expires_in

# 4. 主类 (Main Class)
class AccessToken:
    """
    Danfoss Ally 访问令牌。
    实例化即自动请求，响应数据作为属性暴露。
    使用方式：
        token = AccessToken(config)
        print(token.token_type, token.expires_in)
        print(token.is_expired())
    """

    def __init__(self, config: Config, session: Optional[requests.Session] = None):
        self.config = config
        self._session = session if session is not None else requests.Session()

        # 立即请求 token
        result = self._request_access_token()

        try:
            self.access_token: str = result["access_token"]
            self.token_type: str = result.get("token_type", "Bearer")
            self.expires_in: int = _parse_expires_in(result["expires_in"])
        except (KeyError, TypeError, ValueError) as e:
            raise AuthenticationError("MALFORMED", f"令牌响应结构不正确: {e}", "无法解析令牌")
        if not isinstance(self.access_token, str) or not self.access_token:
            raise AuthenticationError("MALFORMED", "令牌响应中 access_token 为空", "无法解析令牌")

        # 以单调时钟记录获取时间，用于判断过期
        self.obtained_at = time.monotonic()
        logger.debug("已获取访问令牌，有效期 %s 秒", self.expires_in)

    def is_expired(self, now: Optional[float] = None) -> bool:
        """令牌自获取起已超过 expires_in 秒则视为过期"""
        current = time.monotonic() if now is None else now
        return current - self.obtained_at >= self.expires_in

    @property
    def authorization(self) -> str:
        """用于设备接口的 Authorization 头"""
        return f"Bearer {self.access_token}"

    def _request_access_token(self) -> TokenResponse:
        """执行 HTTP 请求并返回原始 JSON 响应"""
        headers = {
            "Content-Type": "application/x-www-form-urlencoded",
            "Accept": "application/json",
            "Authorization": basic_auth_header(self.config.api_key, self.config.api_secret)
        }
        payload = {"grant_type": GRANT_TYPE}

        try:
            response = self._session.post(
                self.config.token_url,
                headers=headers,
                data=payload,
                timeout=self.config.timeout
            )
        except requests.Timeout as e:
            raise TransportError("TIMEOUT", f"获取令牌超时: {e}", "网络错误")
        except requests.RequestException as e:
            raise TransportError("NETWORK", f"网络请求失败: {e}", "网络错误")

        if not 200 <= response.status_code < 300:
            remark = ERROR_STATUS_REMARKS.get(response.status_code, "未知错误")
            raise AuthenticationError(str(response.status_code), f"令牌接口返回 HTTP {response.status_code}", remark)

        try:
            result = response.json()
        except ValueError:
            raise AuthenticationError("MALFORMED", "令牌响应不是合法的 JSON", "无法解析令牌")
        if not isinstance(result, dict):
            raise AuthenticationError("MALFORMED", "令牌响应不是 JSON 对象", "无法解析令牌")
        return cast(TokenResponse, result)

    def __repr__(self):
        # 不输出令牌本身
        return f"<AccessToken token_type='{self.token_type}' expires_in={self.expires_in}>"

# 5. 公共函数 (Public Function)
def get_access_token(config: Config, session: Optional[requests.Session] = None) -> AccessToken:
    """
    获取 Danfoss Ally 访问令牌。

    Raises:
        AuthenticationError: 服务端拒绝凭据或响应无法解析。
        TransportError: 网络错误或超时。
    """
    return AccessToken(config, session)
