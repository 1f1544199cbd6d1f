"""
项目文件读写 - 解析/序列化 .cardforge.json

职责：
1. 校验项目文件基本结构（meta / sets / blueprints 必须存在）
2. 补齐缺省值（元信息、数据表图片绑定、素材库）
3. 序列化时刷新更新时间与版本

测试要点：
- test_parse_project_defaults: 缺省值补齐
- test_parse_invalid_project: 结构错误
- test_roundtrip_keeps_camel_case: 键名保持 camelCase
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ..interfaces import ProjectFileError
from ..models import DEFAULT_IMAGE_COLUMN, ImageBindingConfig, Project
from ..project import PROJECT_VERSION, now_iso, touch_project


def parse_project(text: str, default_image_column: str = DEFAULT_IMAGE_COLUMN) -> Project:
    """解析项目文件文本（未声明图片绑定的数据表使用 default_image_column）"""
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as e:
        raise ProjectFileError(f"项目文件不是有效的JSON: {e}") from e

    if (
        not isinstance(parsed, dict)
        or not isinstance(parsed.get("meta"), dict)
        or parsed.get("sets") is None
        or parsed.get("blueprints") is None
    ):
        raise ProjectFileError("Invalid project file")

    now = now_iso()
    meta = {
        "name": "Imported Project",
        "createdAt": now,
        "updatedAt": now,
        **parsed["meta"],
    }
    meta["version"] = parsed["meta"].get("version") or PROJECT_VERSION

    default_binding = ImageBindingConfig(column=default_image_column).to_document()
    tables = [
        {
            **table,
            "columns": table.get("columns") or [],
            "rows": table.get("rows") or [],
            "imageBinding": {**default_binding, **(table.get("imageBinding") or {})},
        }
        for table in parsed.get("dataTables") or []
    ]

    document: dict[str, Any] = {
        **parsed,
        "meta": meta,
        "items": parsed.get("items") or [],
        "dataTables": tables,
        "assets": {"images": (parsed.get("assets") or {}).get("images") or []},
    }

    try:
        return Project.model_validate(document)
    except ValidationError as e:
        raise ProjectFileError(f"项目文件结构错误: {e}") from e


def stringify_project(project: Project) -> str:
    """序列化项目（刷新更新时间与版本）"""
    touched = touch_project(project)
    return json.dumps(touched.to_document(), ensure_ascii=False, indent=2)


def load_project(path: str | Path, default_image_column: str = DEFAULT_IMAGE_COLUMN) -> Project:
    """从磁盘加载项目，并记录文件路径"""
    path = Path(path)
    if not path.exists():
        raise ProjectFileError(f"项目文件不存在: {path}")

    with open(path, "r", encoding="utf-8") as f:
        project = parse_project(f.read(), default_image_column)

    project.meta.file_path = str(path)
    return project


def save_project(project: Project, path: str | Path) -> Path:
    """保存项目到磁盘"""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(stringify_project(project))
    return path
