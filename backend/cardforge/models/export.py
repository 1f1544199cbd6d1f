"""
导出模型 - 导出选项/进度/结果与报告

这些结构只在单次运行期存在，不写入项目文件
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

DEFAULT_NAMING_TEMPLATE = "{{name}}_{{id}}"


class ExportStatus(str, Enum):
    """导出运行状态"""
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


class ExportOptions(BaseModel):
    """导出选项（每次运行单独提供）"""
    naming_template: str = DEFAULT_NAMING_TEMPLATE
    pixel_ratio: float = Field(2, gt=0)
    fallback_name: str | None = None


class ExportProgress(BaseModel):
    """进度快照（每成功写出一个产物发出一次）"""
    current: int
    total: int
    file_name: str
    row_id: str
    copy_index: int

    model_config = {"frozen": True}


class ExportResult(BaseModel):
    """单次编排运行结果"""
    status: ExportStatus
    total: int = 0
    written: list[str] = Field(default_factory=list)
    skipped: int = 0


class MissingImage(BaseModel):
    """缺失图片记录"""
    row_id: str
    expected: str


class ExportFailure(BaseModel):
    """单行失败记录"""
    row_id: str
    error: str


class ExportReport(BaseModel):
    """批量导出报告（成功数 + 跳过/缺失明细）"""
    status: ExportStatus = ExportStatus.IDLE
    total: int = 0
    written: list[str] = Field(default_factory=list)
    skipped: int = 0
    missing_images: list[MissingImage] = Field(default_factory=list)
    failures: list[ExportFailure] = Field(default_factory=list)

    @property
    def written_count(self) -> int:
        return len(self.written)


# ============================================================================
# 图片解析与复制
# ============================================================================

class ImageResolution(BaseModel):
    """图片引用解析结果"""
    resolved: str | None = None
    expected: str | None = None
    missing: bool = False
    source_path: str | None = None


class CopyFileResult(BaseModel):
    """文件复制能力返回值"""
    ok: bool
    size: int | None = None
    error: str | None = None


class AssetCopyResult(BaseModel):
    """素材复制结果"""
    relative_path: str | None = None
    size: int | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.relative_path is not None


class CopyImagesSummary(BaseModel):
    """批量复制引用图片汇总"""
    copied: int = 0
    missing: int = 0
    failed: int = 0
    skipped: int = 0
    missing_images: list[MissingImage] = Field(default_factory=list)
    failures: list[ExportFailure] = Field(default_factory=list)
