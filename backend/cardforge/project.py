"""
项目工具 - 新建项目、蓝图克隆、更新时间戳

测试要点：
- test_create_empty_project: 默认系列与空集合
- test_clone_blueprint: 新ID且元素深拷贝
- test_touch_project: 更新时间与版本
"""

from __future__ import annotations

import secrets
import string
from datetime import datetime, timezone

from .models import Blueprint, Project, ProjectMeta, SetModel

PROJECT_VERSION = "1.0.0"

_ID_ALPHABET = string.ascii_letters + string.digits + "_-"


def create_id(prefix: str = "") -> str:
    """生成短ID（带前缀时为 prefix_xxxxxxxx）"""
    size = 8 if prefix else 10
    token = "".join(secrets.choice(_ID_ALPHABET) for _ in range(size))
    return f"{prefix}_{token}" if prefix else token


def now_iso() -> str:
    """当前 UTC 时间（ISO8601，毫秒精度）"""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def create_empty_project(name: str = "Untitled Project") -> Project:
    """新建空项目（含默认系列）"""
    now = now_iso()
    return Project(
        meta=ProjectMeta(name=name, created_at=now, updated_at=now, version=PROJECT_VERSION),
        sets=[SetModel(id=create_id("set"), name="Base Set")],
    )


def clone_blueprint(blueprint: Blueprint) -> Blueprint:
    """克隆蓝图（新ID，元素深拷贝）"""
    return blueprint.model_copy(
        update={
            "id": create_id("bp"),
            "elements": [el.model_copy(deep=True) for el in blueprint.elements],
        }
    )


def create_project_from_blueprint(template: Blueprint, name: str = "Untitled Project") -> Project:
    """以模板蓝图新建项目"""
    project = create_empty_project(name)
    project.blueprints = [clone_blueprint(template)]
    return project


def touch_project(project: Project) -> Project:
    """返回更新了时间戳与版本的项目副本"""
    meta = project.meta.model_copy(update={"updated_at": now_iso(), "version": PROJECT_VERSION})
    return project.model_copy(update={"meta": meta})
