"""
项目模型 - 项目/套牌/蓝图/数据表/素材

对应项目文件（.cardforge.json）的顶层结构。
数据行 data 为任意深度的结构化记录，不做 schema 约束。
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import Field

from .base import CardForgeModel
from .element import Element

# 结构化记录（字符串键 -> 字符串/数字/布尔/null/数组/嵌套记录）
Value = Union[str, int, float, bool, None, list[Any], dict[str, Any]]
Record = dict[str, Any]

DEFAULT_IMAGE_COLUMN = "art"


class ProjectMeta(CardForgeModel):
    """项目元信息"""
    name: str = "Untitled Project"
    created_at: str = ""
    updated_at: str = ""
    version: str = ""
    file_path: str | None = None


class SetModel(CardForgeModel):
    """卡牌系列"""
    id: str
    name: str
    description: str | None = None
    color: str | None = None


class CanvasSize(CardForgeModel):
    """画布尺寸"""
    w: float
    h: float


class Blueprint(CardForgeModel):
    """蓝图（卡面模板）"""
    id: str
    name: str = ""
    description: str | None = None
    category: str | None = None
    size: CanvasSize = Field(default_factory=lambda: CanvasSize(w=750, h=1050))
    background: str | None = None
    elements: list[Element] = Field(default_factory=list)


# === 卡面插图 ===

class ImageArt(CardForgeModel):
    """静态插图"""
    kind: Literal["image"] = "image"
    src: str


class VideoArt(CardForgeModel):
    """视频插图（仅 poster 可作为静态图使用）"""
    kind: Literal["video"] = "video"
    src: str
    poster: str | None = None


CardArt = Annotated[Union[ImageArt, VideoArt], Field(discriminator="kind")]


class DataRow(CardForgeModel):
    """数据行"""
    id: str
    data: Record = Field(default_factory=dict)
    quantity: Any = Field(1, description="原始数量值，展开时再规范化")
    set_id: str | None = None
    blueprint_id: str | None = None
    art: CardArt | None = None
    race: str | None = None
    traits: list[str] | None = None


class ExpandedRow(DataRow):
    """按数量展开后的数据行（仅导出期存在，不持久化）"""
    copy_index: int = Field(..., ge=1, description="1-based 副本序号")


class ImageBindingConfig(CardForgeModel):
    """数据表图片绑定配置"""
    column: str = DEFAULT_IMAGE_COLUMN
    images_folder: str = ""
    placeholder: str = ""
    copy_to_assets: bool = True


class DataTable(CardForgeModel):
    """数据表"""
    id: str
    name: str = ""
    set_id: str | None = None
    columns: list[str] = Field(default_factory=list)
    rows: list[DataRow] = Field(default_factory=list)
    image_binding: ImageBindingConfig = Field(default_factory=ImageBindingConfig)


class ImageAsset(CardForgeModel):
    """项目内图片素材"""
    id: str
    name: str
    src: str
    size: int | None = None
    added_at: str | None = None


class ProjectAssets(CardForgeModel):
    """项目素材库"""
    images: list[ImageAsset] = Field(default_factory=list)


class Item(CardForgeModel):
    """卡牌条目（由数据行生成）"""
    id: str
    name: str
    set_id: str
    blueprint_id: str
    data: Record = Field(default_factory=dict)
    quantity: int = 1
    source_row_id: str | None = None
    art: CardArt | None = None
    race: str | None = None
    traits: list[str] | None = None


class Project(CardForgeModel):
    """项目实体"""
    meta: ProjectMeta = Field(default_factory=ProjectMeta)
    sets: list[SetModel] = Field(default_factory=list)
    blueprints: list[Blueprint] = Field(default_factory=list)
    items: list[Item] = Field(default_factory=list)
    data_tables: list[DataTable] = Field(default_factory=list)
    assets: ProjectAssets = Field(default_factory=ProjectAssets)

    def get_blueprint(self, blueprint_id: str | None = None) -> Blueprint | None:
        """按ID获取蓝图，未指定或未找到时取第一个"""
        if blueprint_id:
            for bp in self.blueprints:
                if bp.id == blueprint_id:
                    return bp
        return self.blueprints[0] if self.blueprints else None

    def get_table(self, table_id: str | None = None) -> DataTable | None:
        """按ID获取数据表，未指定或未找到时取第一个"""
        if table_id:
            for table in self.data_tables:
                if table.id == table_id:
                    return table
        return self.data_tables[0] if self.data_tables else None
