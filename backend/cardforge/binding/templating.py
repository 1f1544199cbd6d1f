"""
模板替换引擎 - 将数据行绑定到蓝图元素

职责：
1. 显式绑定键：元素内容整体替换为 resolve_path(row, binding_key)
2. 内联占位符：替换文本中的 {{ path }}，缺失字段替换为空串
3. 统一的值字符串化规则（stringify_value）
4. 生成绑定后的蓝图副本，原蓝图与元素不被修改

字符串化规则：
- None -> ""；布尔 -> "true"/"false"
- 整数值的浮点数不带 ".0"（7.0 -> "7"）
- 映射/数组 -> 紧凑 JSON（保留非 ASCII 字符）

测试要点：
- test_replace_placeholders: 占位符替换
- test_binding_key_overrides_text: 绑定键整体替换
- test_image_binding_unwraps_art: 插图对象解包
- test_source_blueprint_untouched: 原蓝图不变
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import BaseModel

from ..models import Blueprint, Element, ImageElement, Record, TextElement, Value
from .path_resolver import resolve_path

# {{ path }}：路径允许字母/数字/./-/_，花括号内两侧空白忽略
PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*([a-zA-Z0-9_.\-]+)\s*\}\}")

LANG_KEY = "__lang"
DEFAULT_LANG = "en"
LOCALIZED_KEYS = ("en", "ar")


def stringify_value(value: Value) -> str:
    """绑定值字符串化"""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float, str)):
        return str(value)
    if isinstance(value, BaseModel):
        value = value.model_dump(mode="json", by_alias=True, exclude_none=True)
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"), default=str)


def resolve_localized_value(value: Any, row: Mapping[str, Any]) -> Any:
    """多语言值取当前语言（row["__lang"]），依次回退 en / ar"""
    if not value or not isinstance(value, Mapping):
        return value
    if not any(key in value for key in LOCALIZED_KEYS):
        return value
    lang = row.get(LANG_KEY)
    if not isinstance(lang, str):
        lang = DEFAULT_LANG
    for key in (lang, *LOCALIZED_KEYS):
        if value.get(key) is not None:
            return value[key]
    return ""


def replace_placeholders(text: str, row: Mapping[str, Any]) -> str:
    """替换文本中的所有 {{ path }} 占位符"""

    def _sub(match: re.Match[str]) -> str:
        resolved = resolve_localized_value(resolve_path(row, match.group(1)), row)
        return stringify_value(resolved)

    return PLACEHOLDER_PATTERN.sub(_sub, text)


def find_placeholders(text: str) -> list[str]:
    """列出文本中出现的占位符路径（按出现顺序）"""
    return PLACEHOLDER_PATTERN.findall(text or "")


def resolve_image_binding_value(value: Any) -> Any:
    """插图对象解包：image 取 src，video 取 poster（无 poster 为空）"""
    if not value:
        return value
    if isinstance(value, BaseModel):
        value = value.model_dump()
    if isinstance(value, Mapping) and value.get("kind") and value.get("src"):
        if value["kind"] == "video":
            return value.get("poster") or ""
        return value["src"]
    return value


def apply_bindings_to_elements(elements: Sequence[Element], row: Record) -> list[Element]:
    """对元素列表应用绑定，返回新列表（原元素不变）"""
    result: list[Element] = []
    for el in elements:
        binding_key = (el.binding_key or "").strip()

        if isinstance(el, TextElement):
            if binding_key:
                resolved = resolve_localized_value(resolve_path(row, binding_key), row)
                text = stringify_value(resolved)
            else:
                text = replace_placeholders(el.text or "", row)
            result.append(el.model_copy(update={"text": text}))

        elif isinstance(el, ImageElement) and binding_key:
            resolved = resolve_image_binding_value(resolve_path(row, binding_key))
            result.append(el.model_copy(update={"src": stringify_value(resolved)}))

        else:
            result.append(el)
    return result


def apply_bindings_to_blueprint(blueprint: Blueprint, row: Record) -> Blueprint:
    """生成绑定后的蓝图副本"""
    return blueprint.model_copy(
        update={"elements": apply_bindings_to_elements(blueprint.elements, row)}
    )
