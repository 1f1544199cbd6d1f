"""
批量导出任务 - 项目级导出的完整组合

职责：
1. 选择蓝图与数据表（未指定时取第一个）
2. 逐行构造渲染数据：插图覆盖、语言、图片列解析（缺失时使用占位图）
3. 非原地绑定蓝图后交给外部栅格化能力
4. 汇总报告：写出数、跳过数、缺失图片、单行失败

错误分级：
- 行数据解析/栅格化异常：记为单行失败并跳过该行，批次继续
- 写出异常：致命，记录后向上抛出

测试要点：
- test_export_writes_bound_cards: 绑定后写出
- test_missing_image_uses_placeholder: 缺失图片回退占位图并记录
- test_rasterize_error_recorded: 栅格化异常记为失败
- test_sink_error_fatal: 写出异常中止
"""

from __future__ import annotations

import logging
from typing import Any

from ..assets.image_resolver import ImageReferenceResolver
from ..binding import apply_bindings_to_blueprint, resolve_path, set_path_value
from ..binding.templating import LANG_KEY
from ..config import RuntimeConfig, get_config
from ..interfaces import (
    ExportAlreadyRunningError,
    ExportError,
    IArtifactSink,
    ICardRasterizer,
    IRenderer,
)
from ..models import (
    Blueprint,
    ExpandedRow,
    ExportFailure,
    ExportOptions,
    ExportReport,
    ExportStatus,
    ImageBindingConfig,
    MissingImage,
    Project,
    VideoArt,
)
from ..storage.paths import get_parent_path
from .orchestrator import ExportCallbacks, ExportOrchestrator
from .quantity import expand_rows_with_quantity

logger = logging.getLogger(__name__)


class BoundRowRenderer(IRenderer):
    """行数据解析 + 蓝图绑定 + 栅格化"""

    def __init__(
        self,
        rasterizer: ICardRasterizer,
        resolver: ImageReferenceResolver,
        binding: ImageBindingConfig,
        report: ExportReport,
        project_root: str | None = None,
        lang: str = "en",
    ):
        self.rasterizer = rasterizer
        self.resolver = resolver
        self.binding = binding
        self.report = report
        self.project_root = project_root
        self.lang = lang
        self._missing_keys: set[tuple[str, str]] = set()

    def _record_missing(self, row_id: str, expected: str) -> None:
        key = (row_id, expected)
        if key in self._missing_keys:
            return
        self._missing_keys.add(key)
        self.report.missing_images.append(MissingImage(row_id=row_id, expected=expected))
        logger.warning(f"图片缺失: 行={row_id} 期望={expected}")

    def build_render_data(self, row: ExpandedRow) -> dict[str, Any]:
        """构造渲染数据（插图覆盖 + 语言 + 已解析图片）"""
        art = row.art
        if isinstance(art, VideoArt) and not art.poster:
            self._record_missing(row.id, "poster")

        data: dict[str, Any] = {**row.data}
        if art is not None:
            data["art"] = art.model_dump(exclude_none=True)
        data[LANG_KEY] = self.lang

        column = self.binding.column
        if not column:
            return data

        raw = resolve_path(data, column)
        result = self.resolver.resolve(raw, self.binding, self.project_root)
        resolved = result.resolved
        if result.missing:
            self._record_missing(row.id, result.expected or str(raw if raw is not None else column))
            resolved = self.binding.placeholder or ""
        if resolved is None:
            return data
        return set_path_value(data, column, resolved)

    def render(
        self,
        row: ExpandedRow,
        copy_index: int,
        blueprint: Blueprint,
        options: ExportOptions,
    ) -> bytes | None:
        try:
            data = self.build_render_data(row)
            bound = apply_bindings_to_blueprint(blueprint, data)
            return self.rasterizer.rasterize(bound, data, options.pixel_ratio)
        except Exception as e:
            logger.warning(f"渲染失败: 行={row.id}#{copy_index}: {e}")
            self.report.failures.append(ExportFailure(row_id=row.id, error=str(e) or "RENDER_FAILED"))
            return None


class BatchExporter:
    """项目级批量导出"""

    def __init__(
        self,
        rasterizer: ICardRasterizer,
        sink: IArtifactSink,
        resolver: ImageReferenceResolver | None = None,
        extension: str | None = None,
        config: RuntimeConfig | None = None,
    ):
        self.config = config or get_config()
        self.rasterizer = rasterizer
        self.sink = sink
        self.resolver = resolver or ImageReferenceResolver(
            extensions=self.config.image_binding.extensions
        )
        self.extension = extension or self.config.export.extension
        self.last_report: ExportReport | None = None
        self._orchestrator: ExportOrchestrator | None = None

    def cancel(self) -> None:
        """取消当前导出"""
        if self._orchestrator is not None:
            self._orchestrator.cancel()

    def export(
        self,
        project: Project,
        options: ExportOptions | None = None,
        blueprint_id: str | None = None,
        table_id: str | None = None,
        project_root: str | None = None,
        lang: str = "en",
        callbacks: ExportCallbacks | None = None,
    ) -> ExportReport:
        """执行批量导出并返回报告"""
        if self._orchestrator is not None and self._orchestrator.status == ExportStatus.RUNNING:
            raise ExportAlreadyRunningError("导出正在进行中")

        blueprint = project.get_blueprint(blueprint_id)
        if blueprint is None:
            raise ExportError("项目中没有可用的蓝图")

        table = project.get_table(table_id)
        rows = table.rows if table else []
        binding = (
            table.image_binding
            if table
            else ImageBindingConfig(column=self.config.image_binding.column)
        )
        if project_root is None and project.meta.file_path:
            project_root = get_parent_path(project.meta.file_path)

        options = options or self.config.default_export_options()
        report = ExportReport(total=len(expand_rows_with_quantity(rows)))
        self.last_report = report

        renderer = BoundRowRenderer(
            self.rasterizer,
            self.resolver,
            binding,
            report,
            project_root=project_root,
            lang=lang,
        )
        self._orchestrator = ExportOrchestrator(renderer, self.sink, self.extension)

        try:
            result = self._orchestrator.run(blueprint, rows, options, callbacks)
        except Exception as e:
            report.status = ExportStatus.FAILED
            if self._orchestrator.last_result is not None:
                report.written = self._orchestrator.last_result.written
                report.skipped = self._orchestrator.last_result.skipped
            report.failures.append(ExportFailure(row_id="unknown", error=str(e) or "EXPORT_FAILED"))
            raise

        report.status = result.status
        report.written = result.written
        report.skipped = result.skipped
        return report
