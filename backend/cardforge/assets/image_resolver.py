"""
图片引用解析器 - 将绑定值解析为可用的图片来源

职责：
1. 插图对象解包（image 取 src，video 取 poster）
2. 按来源类型分类：data/http(s) -> file:// -> 项目 assets/ -> 绝对路径 -> 图片目录候选
3. 通过注入的 IFileSystem 校验存在性（未注入时视为存在）
4. 同步预览变体：不校验存在性，只构造最可能的路径

说明：
- 以 /assets/ 开头的值按项目内相对路径处理，不按 POSIX 绝对路径处理
- 校验变体不替换占位图，是否使用占位图由调用方决定

测试要点：
- test_remote_passthrough: 远程/内联地址直接通过
- test_video_without_poster_missing: 无 poster 的视频视为缺失
- test_candidate_extension_order: 依次尝试 .png/.jpg/.jpeg/.webp
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping, Sequence
from typing import Any
from urllib.parse import unquote

from pydantic import BaseModel

from ..interfaces import IFileSystem
from ..models import ImageBindingConfig, ImageResolution
from ..storage.paths import join_path

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".webp")

_DRIVE_PATH = re.compile(r"^[a-zA-Z]:[\\/]")
_DRIVE_PREFIX = re.compile(r"^[a-zA-Z]:")
_HAS_EXTENSION = re.compile(r"\.[a-zA-Z0-9]+$")


# ============================================================================
# 分类与规范化
# ============================================================================

def is_remote_or_data(value: str) -> bool:
    return value.startswith(("data:", "http://", "https://"))


def is_file_url(value: str) -> bool:
    return value.startswith("file://")


def is_assets_path(value: str) -> bool:
    return value.startswith(("assets/", "assets\\", "/assets/"))


def is_absolute_path(value: str) -> bool:
    """盘符路径 / UNC 路径 / POSIX 绝对路径"""
    return bool(_DRIVE_PATH.match(value)) or value.startswith(("\\\\", "/"))


def file_url_to_path(value: str) -> str:
    """file:// URL 转本地路径"""
    if not is_file_url(value):
        return value
    rest = unquote(value[len("file://"):])
    if rest.startswith("/"):
        stripped = rest.lstrip("/")
        # file:///C:/x -> C:/x
        if _DRIVE_PREFIX.match(stripped):
            return stripped
        return "/" + stripped
    if _DRIVE_PREFIX.match(rest):
        return rest
    # file://server/share -> //server/share
    return f"//{rest}"


def has_extension(value: str) -> bool:
    return bool(_HAS_EXTENSION.search(value))


def build_candidates(raw: str, extensions: Sequence[str] = IMAGE_EXTENSIONS) -> list[str]:
    """候选文件名：已有扩展名时只有自身，否则按固定顺序追加扩展名"""
    cleaned = raw.strip()
    if not cleaned:
        return [""]
    if has_extension(cleaned):
        return [cleaned]
    return [f"{cleaned}{ext}" for ext in extensions]


def resolve_card_art_source(value: Any) -> str | None:
    """插图对象取静态图来源；不是插图对象时返回 None"""
    if isinstance(value, BaseModel):
        value = value.model_dump()
    if not isinstance(value, Mapping):
        return None
    kind = value.get("kind")
    src = value.get("src")
    if kind == "image" and isinstance(src, str):
        return src
    if kind == "video" and isinstance(src, str):
        poster = value.get("poster")
        return poster if isinstance(poster, str) and poster else ""
    return None


def normalize_reference(raw_value: Any) -> str:
    """解包插图对象并规范化为去空白字符串"""
    art = resolve_card_art_source(raw_value)
    value = art if art is not None else raw_value
    if value is None:
        return ""
    return str(value).strip()


# ============================================================================
# 解析器
# ============================================================================

class ImageReferenceResolver:
    """图片引用解析器"""

    def __init__(
        self,
        file_system: IFileSystem | None = None,
        extensions: Sequence[str] = IMAGE_EXTENSIONS,
    ):
        self.file_system = file_system
        self.extensions = tuple(extensions)

    def _exists(self, path: str) -> bool:
        # 无文件能力时放行，避免阻塞预览
        if self.file_system is None:
            return True
        return self.file_system.file_exists(path)

    def resolve(
        self,
        raw_value: Any,
        binding: ImageBindingConfig | None = None,
        project_root: str | None = None,
    ) -> ImageResolution:
        """解析并校验存在性"""
        config = binding or ImageBindingConfig()
        raw = normalize_reference(raw_value)

        if not raw:
            return ImageResolution(missing=True, expected=config.column or "image")

        if is_remote_or_data(raw):
            return ImageResolution(resolved=raw)

        if is_file_url(raw):
            local_path = file_url_to_path(raw)
            if self._exists(local_path):
                return ImageResolution(resolved=raw, source_path=local_path)
            return ImageResolution(missing=True, expected=raw, source_path=local_path)

        # "/assets/..." 也按项目内素材处理，故先于绝对路径判断
        if is_assets_path(raw):
            if not project_root:
                return ImageResolution(resolved=raw)
            full_path = join_path(project_root, raw.lstrip("/"))
            if self._exists(full_path):
                return ImageResolution(resolved=raw, source_path=full_path)
            return ImageResolution(missing=True, expected=raw, source_path=full_path)

        if is_absolute_path(raw):
            if self._exists(raw):
                return ImageResolution(resolved=raw, source_path=raw)
            return ImageResolution(missing=True, expected=raw, source_path=raw)

        if not config.images_folder:
            return ImageResolution(missing=True, expected=raw)

        candidates = build_candidates(raw, self.extensions)
        for candidate in candidates:
            full_path = join_path(config.images_folder, candidate)
            if self._exists(full_path):
                return ImageResolution(
                    resolved=full_path,
                    source_path=full_path,
                    expected=full_path,
                )

        expected = join_path(config.images_folder, candidates[0])
        logger.debug(f"图片未找到: {raw} -> {expected}")
        return ImageResolution(missing=True, expected=expected)

    def resolve_preview(
        self,
        raw_value: Any,
        binding: ImageBindingConfig | None = None,
    ) -> str:
        """预览用同步解析：不校验存在性，空值回退占位图"""
        config = binding or ImageBindingConfig()
        raw = normalize_reference(raw_value)
        if not raw:
            return config.placeholder or ""
        if (
            is_remote_or_data(raw)
            or is_file_url(raw)
            or is_assets_path(raw)
            or is_absolute_path(raw)
        ):
            return raw
        if not config.images_folder:
            return raw
        return join_path(config.images_folder, build_candidates(raw, self.extensions)[0])
