"""
路径解析器 - 结构化记录的点路径读写

职责：
1. resolve_path: 按 "a.b.c" 逐段取值，缺失即返回 None（不抛异常）
2. set_path_value: 非原地写入，复制沿途经过的每一层映射

说明：
- 只有映射可以继续下钻；数组与标量视为不可遍历
- 数字形式的路径段按普通键处理，不解释为数组下标
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


def split_path(path: str) -> list[str]:
    """拆分点路径"""
    return str(path).split(".")


def resolve_path(record: Any, path: str) -> Any:
    """按点路径取值，任一段缺失返回 None"""
    current = record
    for segment in split_path(path):
        if not isinstance(current, Mapping):
            return None
        if segment not in current:
            return None
        current = current[segment]
    return current


def set_path_value(record: Mapping[str, Any], path: str, value: Any) -> dict[str, Any]:
    """按点路径写值，返回新记录（原记录不变）"""
    segments = split_path(path)
    result = dict(record)
    cursor = result
    for segment in segments[:-1]:
        nxt = cursor.get(segment)
        cursor[segment] = dict(nxt) if isinstance(nxt, Mapping) else {}
        cursor = cursor[segment]
    cursor[segments[-1]] = value
    return result
