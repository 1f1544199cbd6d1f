"""
数量展开 - 将一行数据展开为 N 个有序副本

规则：
- 数量规范化为 max(1, floor(number(quantity)))
- 非数字/非有限/<=0 一律视为 1
- 输出保持行顺序，行内按 copy_index 1..N 递增
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from typing import Any

from ..models import DataRow, ExpandedRow


def normalize_quantity(value: Any) -> int:
    """规范化数量"""
    try:
        num = float(value)
    except (TypeError, ValueError):
        return 1
    if not math.isfinite(num) or num <= 0:
        return 1
    return max(1, math.floor(num))


def expand_rows_with_quantity(rows: Iterable[DataRow]) -> list[ExpandedRow]:
    """按数量展开数据行"""
    expanded: list[ExpandedRow] = []
    for row in rows:
        qty = normalize_quantity(row.quantity)
        # 行上残留的副本序号不参与展开
        fields = {k: v for k, v in dict(row).items() if k not in ("copy_index", "copyIndex")}
        for copy_index in range(1, qty + 1):
            expanded.append(ExpandedRow.model_validate({**fields, "copy_index": copy_index}))
    return expanded
