#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Danfoss Ally Configuration Module

This module provides the Config object holding credentials and connection
settings for the Danfoss Ally client. It is built once at startup from the
process environment (optionally seeded from a .env file) and passed into the
Client constructor.

Environment variables:
  - DANFOSS_API_KEY            (required)
  - DANFOSS_API_SECRET         (required)
  - DANFOSS_API_BASE_URL       (optional, default: https://api.danfoss.com)
  - DANFOSS_HTTP_TIMEOUT       (optional, seconds, default: 10)
  - DANFOSS_POLLING_INTERVAL   (optional, seconds, default: 30)
  - DANFOSS_LOG_LEVEL          (optional, default: DEBUG)

License: MIT
"""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import find_dotenv, load_dotenv

from .exceptions import ConfigurationError

# 1. 常量 (Constants)
DEFAULT_BASE_URL = "https://api.danfoss.com"
DEFAULT_TIMEOUT = 10.0
DEFAULT_POLLING_INTERVAL = 30.0
DEFAULT_LOG_LEVEL = "DEBUG"

TOKEN_PATH = "/oauth2/token"
DEVICES_PATH = "/ally/devices"

logger = logging.getLogger(__name__)


def _get_env(environ: Mapping[str, str], name: str) -> Optional[str]:
    """读取环境变量并去除首尾空白；未设置或为空时返回 None"""
    value = environ.get(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


def _require(environ: Mapping[str, str], name: str) -> str:
    value = _get_env(environ, name)
    if value is None:
        raise ConfigurationError(f"缺少必需的环境变量 {name}", variable=name)
    return value


def _float(environ: Mapping[str, str], name: str, default: float) -> float:
    raw = _get_env(environ, name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} 必须是数字，实际为 {raw!r}", variable=name)


def _check_positive(value: object, name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f"{name} 必须是数字，实际为 {value!r}", variable=name)
    if not value > 0:
        raise ConfigurationError(f"{name} 必须大于 0，实际为 {value!r}", variable=name)


@dataclass(frozen=True)
class Config:
    """
    Danfoss Ally 客户端配置，创建后不可修改。

    Attributes:
        api_key (str): API key。
        api_secret (str): API secret。
        base_url (str): API 根地址。
        timeout (float): 每个 HTTP 请求的超时时间（秒）。
        polling_interval (float): 轮询模式下两次拉取之间的间隔（秒）。
        log_level (str): 输出室温时使用的日志级别名称。
    """
    api_key: str
    api_secret: str
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    polling_interval: float = DEFAULT_POLLING_INTERVAL
    log_level: str = DEFAULT_LOG_LEVEL

    def __post_init__(self):
        if not self.api_key or not self.api_key.strip():
            raise ConfigurationError("API key 不能为空", variable="DANFOSS_API_KEY")
        if not self.api_secret or not self.api_secret.strip():
            raise ConfigurationError("API secret 不能为空", variable="DANFOSS_API_SECRET")
        _check_positive(self.timeout, "DANFOSS_HTTP_TIMEOUT")
        _check_positive(self.polling_interval, "DANFOSS_POLLING_INTERVAL")

        level = str(self.log_level).strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ConfigurationError(f"无效的日志级别: {self.log_level}", variable="DANFOSS_LOG_LEVEL")
        # frozen dataclass 只能通过 object.__setattr__ 规范化
        object.__setattr__(self, "log_level", level)

    @property
    def token_url(self) -> str:
        return f"{self.base_url.rstrip('/')}{TOKEN_PATH}"

    @property
    def devices_url(self) -> str:
        return f"{self.base_url.rstrip('/')}{DEVICES_PATH}"

    @property
    def level(self) -> int:
        """日志级别对应的数值"""
        return logging.getLevelName(self.log_level)

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        load_env_file: bool = True
    ) -> "Config":
        """
        从环境变量构建配置。

        Args:
            environ: 变量来源，默认使用 os.environ。
            load_env_file: 为 True 且 environ 未指定时，先加载当前目录下的 .env 文件
                （已存在的环境变量优先，不会被覆盖）。

        Raises:
            ConfigurationError: 必需变量缺失或为空，或可选变量取值无效。
        """
        if environ is None:
            env_file = find_dotenv(usecwd=True) if load_env_file else ""
            if env_file and load_dotenv(env_file, override=False):
                logger.debug("已从 %s 加载环境变量（已有变量优先）", env_file)
            environ = os.environ

        return cls(
            api_key=_require(environ, "DANFOSS_API_KEY"),
            api_secret=_require(environ, "DANFOSS_API_SECRET"),
            base_url=_get_env(environ, "DANFOSS_API_BASE_URL") or DEFAULT_BASE_URL,
            timeout=_float(environ, "DANFOSS_HTTP_TIMEOUT", DEFAULT_TIMEOUT),
            polling_interval=_float(environ, "DANFOSS_POLLING_INTERVAL", DEFAULT_POLLING_INTERVAL),
            log_level=_get_env(environ, "DANFOSS_LOG_LEVEL") or DEFAULT_LOG_LEVEL,
        )

    def __repr__(self):
        # 不输出密钥
        return (
            f"<Config base_url='{self.base_url}' timeout={self.timeout} "
            f"polling_interval={self.polling_interval} log_level='{self.log_level}'>"
        )
