#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Danfoss Ally Utils Package

This package provides a small Python client for the Danfoss Ally cloud API.
It handles client-credentials token acquisition, device listing and reporting
of the room temperature measured by each smart thermostat.

Main Components:
- Config: credentials and connection settings loaded from the environment
- Client: Danfoss Ally API client with explicit authentication state
- AccessToken: OAuth access token object
- get_access_token: Authentication function for obtaining access tokens
- Device / Status: decoded device records

License: MIT
Version: 0.1.0
"""

__version__ = '0.1.0'
__license__ = 'MIT'

# 导入核心模块
from .config import Config
from .client import Client, Authenticated, Unauthenticated
from .oauth import get_access_token, AccessToken
from .models import Device, Status
from .exceptions import (
    DanfossAllyError,
    ConfigurationError,
    TransportError,
    AuthenticationError,
    DecodeError,
    StateError
)

# 定义公开接口
__all__ = [
    'Config',
    'Client',
    'Authenticated',
    'Unauthenticated',
    'get_access_token',
    'AccessToken',
    'Device',
    'Status',
    'DanfossAllyError',
    'ConfigurationError',
    'TransportError',
    'AuthenticationError',
    'DecodeError',
    'StateError'
]
