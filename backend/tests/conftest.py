"""
pytest 配置与公共 fixtures

使用方式：
    def test_something(sample_rows, recording_sink):
        assert len(sample_rows) == 2
"""

from __future__ import annotations

import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Any, Generator

import pytest

from cardforge.config import RuntimeConfig
from cardforge.config import runtime_config as runtime_config_module
from cardforge.interfaces import EEXIST, ENOENT, IArtifactSink, ICardRasterizer, IFileSystem, IRenderer
from cardforge.models import (
    Blueprint,
    CopyFileResult,
    DataRow,
    DataTable,
    ExpandedRow,
    ExportOptions,
    ExportProgress,
    ImageBindingConfig,
    ImageElement,
    Project,
    ProjectMeta,
    SetModel,
    ShapeElement,
    TextElement,
)


# ============================================================================
# 能力替身
# ============================================================================

class FakeFileSystem(IFileSystem):
    """内存文件系统：files 为已存在路径集合，copy_errors 为依次返回的错误码"""

    def __init__(self, files: set[str] | None = None, copy_errors: list[str] | None = None):
        self.files: set[str] = set(files or [])
        self.copy_errors: list[str] = list(copy_errors or [])
        self.exists_calls: list[str] = []
        self.copies: list[tuple[str, str]] = []

    def file_exists(self, path: str) -> bool:
        self.exists_calls.append(path)
        return path in self.files

    def copy_file(self, source_path: str, destination_path: str) -> CopyFileResult:
        self.copies.append((source_path, destination_path))
        if self.copy_errors:
            return CopyFileResult(ok=False, error=self.copy_errors.pop(0))
        if source_path not in self.files:
            return CopyFileResult(ok=False, error=ENOENT)
        if destination_path in self.files:
            return CopyFileResult(ok=False, error=EEXIST)
        self.files.add(destination_path)
        return CopyFileResult(ok=True, size=1024)


class RecordingRenderer(IRenderer):
    """记录调用的渲染器；skip_ids 中的行返回 None，fail_on 中的行抛异常"""

    def __init__(self, skip_ids: set[str] | None = None, fail_on: set[str] | None = None):
        self.skip_ids = set(skip_ids or [])
        self.fail_on = set(fail_on or [])
        self.calls: list[tuple[str, int]] = []

    def render(
        self,
        row: ExpandedRow,
        copy_index: int,
        blueprint: Blueprint,
        options: ExportOptions,
    ) -> bytes | None:
        self.calls.append((row.id, copy_index))
        if row.id in self.fail_on:
            raise RuntimeError(f"render failed: {row.id}")
        if row.id in self.skip_ids:
            return None
        return f"{row.id}#{copy_index}".encode()


class RecordingSink(IArtifactSink):
    """记录写出的产物；after_write 可在写出后执行（如触发取消）"""

    def __init__(self, fail_after: int | None = None):
        self.fail_after = fail_after
        self.files: dict[str, Any] = {}
        self.progress: list[ExportProgress] = []
        self.after_write: Callable[[int], None] | None = None

    def write(self, file_name: str, artifact: Any, progress: ExportProgress) -> None:
        if self.fail_after is not None and len(self.files) >= self.fail_after:
            raise OSError("disk full")
        self.files[file_name] = artifact
        self.progress.append(progress)
        if self.after_write:
            self.after_write(len(self.files))


class RecordingRasterizer(ICardRasterizer):
    """记录已绑定蓝图与渲染数据的栅格化器；fail_on 按 name 字段匹配"""

    def __init__(self, fail_on: set[str] | None = None):
        self.fail_on = set(fail_on or [])
        self.calls: list[tuple[Blueprint, dict[str, Any]]] = []

    def rasterize(self, blueprint: Blueprint, data: dict[str, Any], pixel_ratio: float) -> bytes | None:
        self.calls.append((blueprint, data))
        if data.get("name") in self.fail_on:
            raise RuntimeError("canvas lost")
        return b"\x89PNG"


# ============================================================================
# 能力 Fixtures
# ============================================================================

@pytest.fixture
def fake_fs() -> FakeFileSystem:
    """空的内存文件系统"""
    return FakeFileSystem()


@pytest.fixture
def make_fs() -> type[FakeFileSystem]:
    """内存文件系统工厂（自定义已存在文件与复制错误）"""
    return FakeFileSystem


@pytest.fixture
def recording_renderer() -> RecordingRenderer:
    return RecordingRenderer()


@pytest.fixture
def recording_sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def recording_rasterizer() -> RecordingRasterizer:
    return RecordingRasterizer()


@pytest.fixture
def make_renderer() -> type[RecordingRenderer]:
    return RecordingRenderer


@pytest.fixture
def make_sink() -> type[RecordingSink]:
    return RecordingSink


@pytest.fixture
def make_rasterizer() -> type[RecordingRasterizer]:
    return RecordingRasterizer


# ============================================================================
# 配置 Fixtures
# ============================================================================

@pytest.fixture
def runtime_config() -> RuntimeConfig:
    """运行期配置"""
    return RuntimeConfig()


@pytest.fixture(autouse=True)
def isolated_global_config(monkeypatch: pytest.MonkeyPatch) -> RuntimeConfig:
    """每个测试使用独立的全局配置（不受仓库 YAML 与其他测试的 reload_config 影响）"""
    config = RuntimeConfig()
    monkeypatch.setattr(runtime_config_module, "_config", config)
    return config


# ============================================================================
# 数据模型 Fixtures
# ============================================================================

@pytest.fixture
def sample_rows() -> list[DataRow]:
    """示例数据行：r1 两份，r2 一份"""
    return [
        DataRow(id="r1", data={"name": "A"}, quantity=2),
        DataRow(id="r2", data={"name": "B"}, quantity=1),
    ]


@pytest.fixture
def sample_blueprint() -> Blueprint:
    """示例蓝图（标题占位符 + 绑定图片 + 背景形状）"""
    return Blueprint(
        id="bp_1",
        name="Hero Card",
        elements=[
            TextElement(id="title", text="{{ name }} ({{cost}})"),
            ImageElement(id="art", src="", binding_key="art"),
            ShapeElement(id="frame", shape="rect"),
        ],
    )


@pytest.fixture
def sample_project(sample_blueprint: Blueprint) -> Project:
    """示例项目（一个蓝图 + 一张数据表）"""
    table = DataTable(
        id="tbl_1",
        name="Heroes",
        columns=["name", "cost", "art"],
        rows=[
            DataRow(id="c1", data={"name": "Knight", "cost": 3, "art": "knight"}),
            DataRow(id="c2", data={"name": "Mage", "cost": 2, "art": "mage"}, quantity=2),
        ],
        image_binding=ImageBindingConfig(
            column="art",
            images_folder="/cards/images",
            placeholder="assets/images/placeholder.png",
        ),
    )
    return Project(
        meta=ProjectMeta(name="Demo", version="1.0.0"),
        sets=[SetModel(id="set_1", name="Base Set")],
        blueprints=[sample_blueprint],
        data_tables=[table],
    )


# ============================================================================
# 文件 Fixtures
# ============================================================================

@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """临时目录"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)
