#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Danfoss Ally API Exceptions Module

This module defines the exception hierarchy for the Danfoss Ally client.
It provides specific exception classes for configuration problems, network
failures, rejected credentials, undecodable responses and calls made in the
wrong order.

License: MIT
"""

class DanfossAllyError(Exception):
    """Danfoss Ally 客户端基础异常类"""
    def __init__(self, code: str, message: str, remark: str = ""):
        self.code = code
        self.message = message
        self.remark = remark
        super().__init__(f"Code {code}: {message} - {remark}")

class ConfigurationError(DanfossAllyError):
    """配置缺失或无效（启动时致命）"""
    def __init__(self, message: str, variable: str = ""):
        self.variable = variable
        remark = f"请检查环境变量 {variable}" if variable else "配置错误"
        super().__init__("CONFIG", message, remark)

class TransportError(DanfossAllyError):
    """网络连接失败、超时或服务端错误"""
    pass

class AuthenticationError(DanfossAllyError):
    """凭据或令牌被服务端拒绝"""
    pass

class DecodeError(DanfossAllyError):
    """响应内容无法解析或结构不符"""
    pass

class StateError(DanfossAllyError):
    """调用顺序错误，例如未认证就请求设备列表"""
    def __init__(self, message: str, operation: str = ""):
        self.operation = operation
        remark = f"操作 {operation} 调用顺序错误" if operation else "调用顺序错误"
        super().__init__("STATE", message, remark)
