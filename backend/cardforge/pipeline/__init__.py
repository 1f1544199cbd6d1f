"""
流水线模块 - 批量导出编排与执行

子模块：
- quantity: 数量规范化与行展开
- naming: 产物文件命名与去重
- orchestrator: 行展开 -> 渲染 -> 写出的编排器
- batch: 项目级批量导出（图片解析 + 绑定 + 栅格化）
"""

from .batch import BatchExporter, BoundRowRenderer
from .naming import ARTIFACT_EXTENSION, FileNamer, build_file_name, build_raw_name, plan_file_names
from .orchestrator import ExportCallbacks, ExportOrchestrator
from .quantity import expand_rows_with_quantity, normalize_quantity

__all__ = [
    "normalize_quantity",
    "expand_rows_with_quantity",
    "ARTIFACT_EXTENSION",
    "FileNamer",
    "build_raw_name",
    "build_file_name",
    "plan_file_names",
    "ExportCallbacks",
    "ExportOrchestrator",
    "BoundRowRenderer",
    "BatchExporter",
]
