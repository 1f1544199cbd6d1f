"""
模块接口契约 - 定义宿主环境注入的能力接口

设计原则：
1. 核心流水线只依赖接口，不依赖具体的渲染/界面/文件实现
2. 每个接口定义清晰的输入输出类型
3. 便于单元测试和mock替换

使用方式：
    from cardforge.interfaces import IRenderer

    class CanvasRenderer(IRenderer):
        def render(self, row, copy_index, blueprint, options) -> bytes | None:
            ...
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .models import (
        Blueprint,
        CopyFileResult,
        ExpandedRow,
        ExportOptions,
        ExportProgress,
    )


# ============================================================================
# 导出能力接口
# ============================================================================

class IRenderer(ABC):
    """渲染器接口 - 将一行数据渲染为一个产物"""

    @abstractmethod
    def render(
        self,
        row: ExpandedRow,
        copy_index: int,
        blueprint: Blueprint,
        options: ExportOptions,
    ) -> bytes | None:
        """
        渲染单个展开行

        Args:
            row: 展开后的数据行
            copy_index: 副本序号（1-based）
            blueprint: 本次运行使用的蓝图（只读）
            options: 导出选项

        Returns:
            产物字节；返回 None/空 表示跳过该行（不算错误）
        """
        ...


class IArtifactSink(ABC):
    """产物写出接口"""

    @abstractmethod
    def write(self, file_name: str, artifact: Any, progress: ExportProgress) -> None:
        """
        持久化单个产物

        Args:
            file_name: 已去重的文件名
            artifact: 渲染产物（bytes 或 data URL）
            progress: 当前进度快照

        Raises:
            OSError: 写出失败（导出整体中止）
        """
        ...


class ICardRasterizer(ABC):
    """卡面栅格化接口 - 外部像素渲染能力"""

    @abstractmethod
    def rasterize(
        self,
        blueprint: Blueprint,
        data: dict[str, Any],
        pixel_ratio: float,
    ) -> bytes | None:
        """
        将已绑定的蓝图栅格化

        Args:
            blueprint: 已应用绑定的蓝图副本
            data: 该行的渲染数据（含已解析图片）
            pixel_ratio: 像素倍率

        Returns:
            图片字节，无产物时返回 None
        """
        ...


# ============================================================================
# 文件能力接口
# ============================================================================

class IFileSystem(ABC):
    """宿主文件能力接口"""

    @abstractmethod
    def file_exists(self, path: str) -> bool:
        """判断文件是否存在"""
        ...

    @abstractmethod
    def copy_file(self, source_path: str, destination_path: str) -> CopyFileResult:
        """
        复制文件（不覆盖已存在的目标）

        Returns:
            CopyFileResult；目标已存在时 error == EEXIST
        """
        ...


# ============================================================================
# 错误码
# ============================================================================

EEXIST = "EEXIST"
ENOENT = "ENOENT"
COPY_FAILED = "COPY_FAILED"
NO_EXTENSION = "NO_EXTENSION"


# ============================================================================
# 异常定义
# ============================================================================

class CardForgeError(Exception):
    """基础异常"""
    pass


class ProjectFileError(CardForgeError):
    """项目文件错误"""
    pass


class ExportError(CardForgeError):
    """导出错误"""
    pass


class ExportAlreadyRunningError(ExportError):
    """同一编排器上重复启动导出"""
    pass
