#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Danfoss Ally Models Module

This module decodes the device-list response of the Danfoss Ally API into
Device and Status objects and exposes the room temperature reported by each
thermostat.

License: MIT
"""

from typing import Any, Dict, List, Optional, TypedDict

from .exceptions import DecodeError

# 表示室温的状态码，按优先级排列
ROOM_TEMPERATURE_CODES = ("va_temperature", "temp_current")

# 1. 类型定义 (Type Definitions)
class StatusRaw(TypedDict):
    code: str
    value: Any

class DeviceRaw(TypedDict, total=False):
    active_time: int
    create_time: int
    id: str
    name: str
    online: bool
    status: List[StatusRaw]
    sub: bool
    time_zone: str
    update_time: int
    device_type: str

class DevicesResponse(TypedDict):
    result: List[DeviceRaw]
    t: int

# 2. 数据类 (Data Classes)
class Status:
    """单个遥测状态，例如 {"code": "temp_current", "value": 215}"""
    def __init__(self, code: str, value: Any):
        self.code = code
        self.value = value

    def __eq__(self, other):
        if not isinstance(other, Status):
            return NotImplemented
        return (self.code, self.value) == (other.code, other.value)

    def __repr__(self):
        return f"<Status code='{self.code}' value={self.value!r}>"

class Device:
    """
    设备列表中的一台设备。
    id、name、status 为必需字段，其余字段缺失时为 None。
    """
    def __init__(
        self,
        id: str,
        name: str,
        status: Optional[List[Status]] = None,
        online: Optional[bool] = None,
        device_type: Optional[str] = None,
        time_zone: Optional[str] = None,
        sub: Optional[bool] = None,
        active_time: Optional[int] = None,
        create_time: Optional[int] = None,
        update_time: Optional[int] = None
    ):
        self.id = id
        self.name = name
        self.status = status or []
        self.online = online
        self.device_type = device_type
        self.time_zone = time_zone
        self.sub = sub
        self.active_time = active_time
        self.create_time = create_time
        self.update_time = update_time

    @property
    def has_room_temperature(self) -> bool:
        """是否上报了室温状态（值可能为 null）"""
        return any(status.code in ROOM_TEMPERATURE_CODES for status in self.status)

    @property
    def room_temperature(self) -> Any:
        """返回第一个非 null 的室温状态值，没有则返回 None"""
        for status in self.status:
            if status.code in ROOM_TEMPERATURE_CODES and status.value is not None:
                return status.value
        return None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Device":
        if not isinstance(data, dict):
            raise DecodeError("SCHEMA", f"设备记录不是对象: {data!r}", "响应结构不符")
        for key in ("id", "name", "status"):
            if key not in data:
                raise DecodeError("SCHEMA", f"设备记录缺少字段 '{key}'", "响应结构不符")
        if not isinstance(data["status"], list):
            raise DecodeError("SCHEMA", f"设备 {data['id']} 的 status 不是列表", "响应结构不符")

        statuses = []
        for item in data["status"]:
            if not isinstance(item, dict) or "code" not in item:
                raise DecodeError("SCHEMA", f"设备 {data['id']} 的状态记录无效: {item!r}", "响应结构不符")
            statuses.append(Status(item["code"], item.get("value")))

        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            status=statuses,
            online=data.get("online"),
            device_type=data.get("device_type"),
            time_zone=data.get("time_zone"),
            sub=data.get("sub"),
            active_time=data.get("active_time"),
            create_time=data.get("create_time"),
            update_time=data.get("update_time"),
        )

    def __repr__(self):
        return f"<Device id='{self.id}' name='{self.name}' online={self.online} room_temperature={self.room_temperature!r}>"

# 3. 公共函数 (Public Function)
def parse_devices(payload: Any) -> List[Device]:
    """
    解析设备列表响应 {"result": [...], "t": ...}。

    Raises:
        DecodeError: 响应结构不符。
    """
    if not isinstance(payload, dict):
        raise DecodeError("SCHEMA", "设备列表响应不是 JSON 对象", "响应结构不符")
    result = payload.get("result")
    if not isinstance(result, list):
        raise DecodeError("SCHEMA", "设备列表响应缺少 'result' 列表", "响应结构不符")
    return [Device.from_dict(item) for item in result]
