"""
素材模块 - 图片引用解析与素材复制

子模块：
- image_resolver: 绑定值 -> 图片来源（含存在性校验）
- asset_copy: 外部图片复制进项目素材目录
"""

from .asset_copy import (
    ASSETS_IMAGES_DIR,
    copy_image_to_project_assets,
    copy_referenced_images,
    get_unique_name,
)
from .image_resolver import (
    IMAGE_EXTENSIONS,
    ImageReferenceResolver,
    build_candidates,
    file_url_to_path,
    is_absolute_path,
    is_assets_path,
    is_file_url,
    is_remote_or_data,
    normalize_reference,
)

__all__ = [
    "IMAGE_EXTENSIONS",
    "ImageReferenceResolver",
    "build_candidates",
    "file_url_to_path",
    "is_absolute_path",
    "is_assets_path",
    "is_file_url",
    "is_remote_or_data",
    "normalize_reference",
    "ASSETS_IMAGES_DIR",
    "get_unique_name",
    "copy_image_to_project_assets",
    "copy_referenced_images",
]
