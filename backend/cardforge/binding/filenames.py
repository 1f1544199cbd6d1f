"""
文件名规则 - 文件名清洗与命名模板

职责：
1. sanitize_file_name: 内部保留字符/控制字符替换为 _（首尾直接去掉），折叠空白，截断 120 字符
2. apply_naming_template: 按 {{path}} 生成原始文件名（不清洗）
3. template_references_copy: 判断模板是否引用了副本序号

测试要点：
- test_sanitize_invalid_chars: 'My:Card*Name?' -> 'My_Card_Name'
- test_sanitize_whitespace: '  My   Card  ' -> 'My Card'
- test_sanitize_empty: '   ' -> 'untitled'
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from .path_resolver import resolve_path
from .templating import PLACEHOLDER_PATTERN, find_placeholders, stringify_value

FALLBACK_FILE_NAME = "untitled"
MAX_FILE_NAME_LENGTH = 120

_RESERVED = r'<>:"/\\|?*\x00-\x1f'
_RESERVED_CHARS = re.compile(f"[{_RESERVED}]+")
# 首尾的保留字符与空白直接去掉，不替换为 _
_EDGE_CHARS = re.compile(rf"^[{_RESERVED}\s]+|[{_RESERVED}\s]+$")
_WHITESPACE = re.compile(r"\s+")


def sanitize_file_name(value: Any) -> str:
    """生成文件系统安全的名称"""
    cleaned = _EDGE_CHARS.sub("", str(value))
    cleaned = _RESERVED_CHARS.sub("_", cleaned)
    cleaned = _WHITESPACE.sub(" ", cleaned).strip()
    if not cleaned:
        return FALLBACK_FILE_NAME
    return cleaned[:MAX_FILE_NAME_LENGTH]


def apply_naming_template(template: str | None, data: Mapping[str, Any]) -> str:
    """
    应用命名模板

    Args:
        template: 命名模板，如 "{{name.en}}_{{id}}"
        data: 行数据 + 调用方注入的 id / copy / setId

    Returns:
        原始文件名（未清洗）；模板为空时返回 "untitled"
    """
    if not template or not template.strip():
        return FALLBACK_FILE_NAME
    return PLACEHOLDER_PATTERN.sub(
        lambda m: stringify_value(resolve_path(data, m.group(1))), template
    )


def template_references_copy(template: str | None) -> bool:
    """模板中是否存在 {{copy...}} 占位符"""
    return any(path.startswith("copy") for path in find_placeholders(template or ""))
