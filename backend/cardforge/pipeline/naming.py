"""
产物命名 - 单次导出运行内的文件名生成与去重

职责：
1. 命名模板 -> 回退名 -> 副本后缀 -> 清洗 -> 扩展名
2. FileNamer: 运行期去重（大小写不敏感），重复名插入 _N（N 从 2 开始）
3. plan_file_names: 不渲染，仅预览一次运行会写出的文件名

测试要点：
- test_copy_suffix_without_copy_token: 未引用 {{copy}} 时自动追加副本号
- test_collision_suffix: 同名产物追加 _2/_3
- test_collision_case_insensitive: 大小写不同视为同名
"""

from __future__ import annotations

from collections.abc import Iterable

from ..binding import apply_naming_template, sanitize_file_name, template_references_copy
from ..models import DataRow, ExpandedRow, ExportOptions
from .quantity import expand_rows_with_quantity, normalize_quantity

ARTIFACT_EXTENSION = ".png"


class FileNamer:
    """运行期文件名去重器（每次运行新建一个）"""

    def __init__(self) -> None:
        self._used: dict[str, int] = {}

    def ensure_unique(self, file_name: str) -> str:
        """返回本次运行内唯一的文件名"""
        key = file_name.lower()
        if key not in self._used:
            self._used[key] = 1
            return file_name

        base, dot, ext = file_name.rpartition(".")
        if not dot:
            base, ext = file_name, ""
        else:
            ext = f".{ext}"

        count = self._used[key]
        while True:
            count += 1
            candidate = f"{base}_{count}{ext}"
            if candidate.lower() not in self._used:
                break
        self._used[key] = count
        self._used[candidate.lower()] = 1
        return candidate


def build_raw_name(row: ExpandedRow, index: int, options: ExportOptions) -> str:
    """生成未清洗的基础名（含副本后缀）"""
    data = {
        **row.data,
        "id": row.id,
        "copy": row.copy_index,
        "setId": row.set_id,
    }
    raw = apply_naming_template(options.naming_template, data)
    base = raw or options.fallback_name or f"card_{index + 1}"
    if not template_references_copy(options.naming_template) and normalize_quantity(row.quantity) > 1:
        return f"{base}_{row.copy_index}"
    return base


def build_file_name(
    row: ExpandedRow,
    index: int,
    options: ExportOptions,
    namer: FileNamer,
    extension: str = ARTIFACT_EXTENSION,
) -> str:
    """生成最终文件名（已清洗、已去重）"""
    base_name = sanitize_file_name(build_raw_name(row, index, options))
    return namer.ensure_unique(f"{base_name}{extension}")


def plan_file_names(
    rows: Iterable[DataRow],
    options: ExportOptions,
    extension: str = ARTIFACT_EXTENSION,
) -> list[tuple[str, int, str]]:
    """预览导出文件名 [(row_id, copy_index, file_name)]"""
    namer = FileNamer()
    return [
        (row.id, row.copy_index, build_file_name(row, i, options, namer, extension))
        for i, row in enumerate(expand_rows_with_quantity(rows))
    ]
