"""
批量导出编排器 - 行展开 -> 渲染 -> 写出

职责：
1. 按数量展开数据行，逐行顺序执行（不并行）
2. 命名去重、进度回调、协作式取消
3. 渲染/写出异常视为致命错误：中止整个运行并上报

状态：IDLE -> RUNNING -> {COMPLETED | CANCELLED | FAILED}

取消只在行与行之间检查；正在进行的单次渲染/写出不会被打断，
已写出的产物保留，不回滚。

测试要点：
- test_run_writes_all_rows: 完整运行
- test_render_none_skips_row: 渲染无产物时静默跳过
- test_cancel_between_rows: 取消后保留已写出的产物
- test_render_error_is_fatal: 渲染异常中止运行
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from ..interfaces import ExportAlreadyRunningError, IArtifactSink, IRenderer
from ..models import Blueprint, DataRow, ExportOptions, ExportProgress, ExportResult, ExportStatus
from .naming import ARTIFACT_EXTENSION, FileNamer, build_file_name
from .quantity import expand_rows_with_quantity

logger = logging.getLogger(__name__)


@dataclass
class ExportCallbacks:
    """导出回调（均可选）"""
    on_progress: Callable[[ExportProgress], None] | None = None
    on_complete: Callable[[], None] | None = None
    on_cancelled: Callable[[], None] | None = None
    on_error: Callable[[BaseException], None] | None = None


class ExportOrchestrator:
    """批量导出编排器（一个实例同一时间只跑一个运行）"""

    def __init__(
        self,
        renderer: IRenderer,
        sink: IArtifactSink,
        extension: str = ARTIFACT_EXTENSION,
    ):
        self.renderer = renderer
        self.sink = sink
        self.extension = extension
        self.status = ExportStatus.IDLE
        self.last_result: ExportResult | None = None
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        """请求取消（下一行开始前生效）"""
        if self.status == ExportStatus.RUNNING:
            logger.info("收到取消请求，将在当前行结束后停止")
        self._cancelled = True

    def run(
        self,
        blueprint: Blueprint,
        rows: Sequence[DataRow],
        options: ExportOptions,
        callbacks: ExportCallbacks | None = None,
    ) -> ExportResult:
        """执行一次批量导出"""
        if self.status == ExportStatus.RUNNING:
            raise ExportAlreadyRunningError("导出正在进行中，请为并发运行创建新的编排器")

        callbacks = callbacks or ExportCallbacks()
        self._cancelled = False
        self.status = ExportStatus.RUNNING
        namer = FileNamer()

        result = ExportResult(status=ExportStatus.RUNNING)
        self.last_result = result

        stopped = False
        try:
            expanded = expand_rows_with_quantity(rows)
            result.total = len(expanded)
            logger.info(f"开始导出: 蓝图={blueprint.id} 产物数={len(expanded)}")

            for i, row in enumerate(expanded):
                if self._cancelled:
                    stopped = True
                    break

                file_name = build_file_name(row, i, options, namer, self.extension)

                artifact = self.renderer.render(row, row.copy_index, blueprint, options)
                if not artifact:
                    result.skipped += 1
                    logger.debug(f"渲染无产物，跳过: {row.id}#{row.copy_index}")
                    continue

                progress = ExportProgress(
                    current=i + 1,
                    total=len(expanded),
                    file_name=file_name,
                    row_id=row.id,
                    copy_index=row.copy_index,
                )
                self.sink.write(file_name, artifact, progress)
                result.written.append(file_name)

                if callbacks.on_progress:
                    callbacks.on_progress(progress)

        except Exception as e:
            logger.exception(f"导出失败: 已写出 {len(result.written)}/{result.total}")
            self.status = ExportStatus.FAILED
            result.status = ExportStatus.FAILED
            if callbacks.on_error:
                callbacks.on_error(e)
            raise

        if stopped:
            self.status = ExportStatus.CANCELLED
            logger.info(f"导出已取消: 已写出 {len(result.written)}/{result.total}")
            if callbacks.on_cancelled:
                callbacks.on_cancelled()
        else:
            self.status = ExportStatus.COMPLETED
            logger.info(f"导出完成: 写出 {len(result.written)}，跳过 {result.skipped}")
            if callbacks.on_complete:
                callbacks.on_complete()

        result.status = self.status
        return result
