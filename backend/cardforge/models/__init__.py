"""
数据模型层 - 定义系统核心数据结构

所有模块通过这些模型交互，实现解耦：
- Project / Blueprint / DataTable / DataRow: 项目文件结构
- Element: 可视元素（text/image/shape/icon）
- ExpandedRow: 按数量展开的导出行
- ExportOptions / ExportProgress / ExportReport: 导出运行期结构
- ImageResolution / AssetCopyResult: 图片解析与素材复制结果
"""

from .base import CardForgeModel
from .element import (
    Element,
    ElementBase,
    IconElement,
    ImageElement,
    ShapeElement,
    TextElement,
)
from .export import (
    DEFAULT_NAMING_TEMPLATE,
    AssetCopyResult,
    CopyFileResult,
    CopyImagesSummary,
    ExportFailure,
    ExportOptions,
    ExportProgress,
    ExportReport,
    ExportResult,
    ExportStatus,
    ImageResolution,
    MissingImage,
)
from .project import (
    DEFAULT_IMAGE_COLUMN,
    Blueprint,
    CanvasSize,
    CardArt,
    DataRow,
    DataTable,
    ExpandedRow,
    ImageArt,
    ImageAsset,
    ImageBindingConfig,
    Item,
    Project,
    ProjectAssets,
    ProjectMeta,
    Record,
    SetModel,
    Value,
    VideoArt,
)

__all__ = [
    "CardForgeModel",
    "Element",
    "ElementBase",
    "TextElement",
    "ImageElement",
    "ShapeElement",
    "IconElement",
    "Project",
    "ProjectMeta",
    "ProjectAssets",
    "ImageAsset",
    "SetModel",
    "Blueprint",
    "CanvasSize",
    "CardArt",
    "ImageArt",
    "VideoArt",
    "DataRow",
    "DataTable",
    "ExpandedRow",
    "ImageBindingConfig",
    "Item",
    "Record",
    "Value",
    "DEFAULT_IMAGE_COLUMN",
    "DEFAULT_NAMING_TEMPLATE",
    "ExportStatus",
    "ExportOptions",
    "ExportProgress",
    "ExportResult",
    "ExportReport",
    "MissingImage",
    "ExportFailure",
    "ImageResolution",
    "CopyFileResult",
    "AssetCopyResult",
    "CopyImagesSummary",
]
