"""
素材复制 - 将外部图片复制进项目 assets/images/

职责：
1. 由源文件名清洗出安全文件名，并与已见名称去重（大小写不敏感）
2. 目标已存在（EEXIST）时换名重试一次，其他错误立即返回错误码
3. 批量"复制引用图片到项目"：逐行解析、复制、改写为项目内相对路径，
   缺失/失败计入汇总，不中断批次

测试要点：
- test_copy_success_updates_seen: 成功后登记名称
- test_copy_eexist_retry_once: 冲突重试一次
- test_copy_other_error_no_retry: 其他错误不重试
- test_copy_referenced_images_summary: 批量汇总
"""

from __future__ import annotations

import logging
from collections.abc import MutableSet

from ..binding import resolve_path, sanitize_file_name, set_path_value
from ..interfaces import COPY_FAILED, EEXIST, NO_EXTENSION, IFileSystem
from ..models import (
    AssetCopyResult,
    CopyImagesSummary,
    DataRow,
    ExportFailure,
    ImageAsset,
    MissingImage,
    Project,
)
from ..project import create_id, now_iso
from ..storage.paths import get_extension, get_file_name, join_path
from .image_resolver import (
    ImageReferenceResolver,
    is_assets_path,
    is_remote_or_data,
    normalize_reference,
)

logger = logging.getLogger(__name__)

ASSETS_IMAGES_DIR = "assets/images"


def get_unique_name(base_name: str, existing: MutableSet[str]) -> str:
    """在已见名称中取唯一名（追加 _1/_2...），并登记"""
    ext = get_extension(base_name)
    root = base_name[: len(base_name) - len(ext)] if ext else base_name
    name = base_name
    counter = 1
    while name.lower() in existing:
        name = f"{root}_{counter}{ext}"
        counter += 1
    existing.add(name.lower())
    return name


def copy_image_to_project_assets(
    source_path: str,
    project_root: str,
    existing_names: MutableSet[str],
    file_system: IFileSystem,
    images_dir: str = ASSETS_IMAGES_DIR,
) -> AssetCopyResult:
    """
    复制单张图片到项目素材目录

    Args:
        source_path: 源文件路径
        project_root: 项目根目录
        existing_names: 本批次已见文件名（小写），成功后会被更新
        file_system: 文件能力
        images_dir: 项目内素材子目录

    Returns:
        AssetCopyResult（relative_path/size 或 error 错误码）
    """
    file_name = get_file_name(source_path)
    ext = get_extension(file_name)
    if not ext:
        return AssetCopyResult(error=NO_EXTENSION)

    safe_base = f"{sanitize_file_name(file_name[: len(file_name) - len(ext)])}{ext}"

    result = None
    for attempt in range(2):
        name = get_unique_name(safe_base, existing_names)
        relative_path = f"{images_dir}/{name}"
        result = file_system.copy_file(source_path, join_path(project_root, relative_path))
        if result.ok:
            return AssetCopyResult(relative_path=relative_path, size=result.size or 0)
        if result.error != EEXIST:
            break
        if attempt == 0:
            logger.info(f"素材目标已存在，换名重试: {name}")

    return AssetCopyResult(error=result.error or COPY_FAILED)


def copy_referenced_images(
    project: Project,
    table_id: str | None,
    project_root: str,
    resolver: ImageReferenceResolver,
    file_system: IFileSystem,
    force: bool = False,
    images_dir: str = ASSETS_IMAGES_DIR,
) -> tuple[Project, CopyImagesSummary]:
    """
    将数据表引用的外部图片复制进项目

    Returns:
        (新项目, 汇总)；输入项目不被修改
    """
    summary = CopyImagesSummary()
    table = project.get_table(table_id)
    if table is None:
        return project, summary

    binding = table.image_binding
    if not binding.copy_to_assets and not force:
        logger.info(f"数据表 {table.id} 未开启 copy_to_assets，跳过复制")
        summary.skipped = len(table.rows)
        return project, summary

    seen = {get_file_name(asset.src).lower() for asset in project.assets.images}
    new_rows: list[DataRow] = []
    new_assets: list[ImageAsset] = []

    for row in table.rows:
        raw = normalize_reference(resolve_path(row.data, binding.column))
        if not raw or is_remote_or_data(raw) or is_assets_path(raw):
            summary.skipped += 1
            new_rows.append(row)
            continue

        resolution = resolver.resolve(raw, binding, project_root)
        if resolution.missing or not resolution.source_path:
            expected = resolution.expected or raw
            logger.warning(f"引用图片缺失: 行={row.id} 期望={expected}")
            summary.missing += 1
            summary.missing_images.append(MissingImage(row_id=row.id, expected=expected))
            new_rows.append(row)
            continue

        copied = copy_image_to_project_assets(
            resolution.source_path, project_root, seen, file_system, images_dir
        )
        if not copied.ok:
            logger.warning(f"图片复制失败: 行={row.id} 错误={copied.error}")
            summary.failed += 1
            summary.failures.append(ExportFailure(row_id=row.id, error=copied.error or COPY_FAILED))
            new_rows.append(row)
            continue

        summary.copied += 1
        new_rows.append(
            row.model_copy(update={"data": set_path_value(row.data, binding.column, copied.relative_path)})
        )
        new_assets.append(
            ImageAsset(
                id=create_id("img"),
                name=get_file_name(copied.relative_path),
                src=copied.relative_path,
                size=copied.size,
                added_at=now_iso(),
            )
        )

    logger.info(
        f"复制引用图片完成: 复制 {summary.copied}，缺失 {summary.missing}，"
        f"失败 {summary.failed}，跳过 {summary.skipped}"
    )

    new_table = table.model_copy(update={"rows": new_rows})
    updated = project.model_copy(
        update={
            "data_tables": [new_table if t.id == table.id else t for t in project.data_tables],
            "assets": project.assets.model_copy(
                update={"images": [*project.assets.images, *new_assets]}
            ),
        }
    )
    return updated, summary
