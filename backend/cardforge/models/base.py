"""
模型基类 - 统一项目文件的字段命名

项目文件沿用 camelCase 键名（zIndex / bindingKey / imagesFolder ...），
Python 侧使用 snake_case，两种写法均可构造。
"""

from __future__ import annotations

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CardForgeModel(BaseModel):
    """项目文件模型基类"""

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "extra": "allow",
    }

    def to_document(self) -> dict:
        """导出为项目文件结构（camelCase，省略空值）"""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
