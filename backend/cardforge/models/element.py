"""
可视元素模型 - 蓝图中的文本/图片/形状/图标

对应项目文件 blueprints[].elements[]，按 type 字段区分变体
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import Field

from .base import CardForgeModel


class ElementBase(CardForgeModel):
    """元素公共几何属性"""
    id: str
    name: str = ""
    x: float = 0
    y: float = 0
    w: float = 0
    h: float = 0
    rotation: float = 0
    visible: bool = True
    opacity: float | None = None
    z_index: int = 0
    locked: bool | None = None
    binding_key: str | None = Field(None, description="显式绑定字段路径，整体替换元素内容")


class TextElement(ElementBase):
    """文本元素（支持 {{path}} 占位符）"""
    type: Literal["text"] = "text"
    text: str = ""


class ImageElement(ElementBase):
    """图片元素"""
    type: Literal["image"] = "image"
    src: str = ""


class ShapeElement(ElementBase):
    """形状元素（不参与绑定）"""
    type: Literal["shape"] = "shape"
    shape: str = "rect"


class IconElement(ElementBase):
    """图标元素（不参与绑定）"""
    type: Literal["icon"] = "icon"
    icon_name: str = ""


Element = Annotated[
    Union[TextElement, ImageElement, ShapeElement, IconElement],
    Field(discriminator="type"),
]
