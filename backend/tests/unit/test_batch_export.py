"""
批量导出任务单元测试

每个模块完成后必须运行：pytest backend/tests/unit/test_batch_export.py -v
"""

import pytest

from cardforge.assets import ImageReferenceResolver
from cardforge.config import RuntimeConfig
from cardforge.interfaces import ExportAlreadyRunningError, ExportError
from cardforge.models import (
    DataRow,
    ExportOptions,
    ExportStatus,
    ImageArt,
    Project,
    VideoArt,
)
from cardforge.pipeline import BatchExporter, ExportCallbacks


class TestBatchExporter:
    """项目级批量导出测试"""

    @pytest.fixture
    def fs(self, make_fs):
        return make_fs(files={"/cards/images/knight.png"})

    @pytest.fixture
    def exporter(self, recording_rasterizer, recording_sink, fs) -> BatchExporter:
        return BatchExporter(recording_rasterizer, recording_sink, ImageReferenceResolver(fs))

    def test_export_writes_bound_cards(
        self, exporter, sample_project: Project, recording_rasterizer, recording_sink,
    ):
        """测试绑定后写出，原蓝图不变"""
        report = exporter.export(sample_project)

        assert report.status == ExportStatus.COMPLETED
        assert report.total == 3
        assert report.written == ["Knight_c1.png", "Mage_c2_1.png", "Mage_c2_2.png"]
        assert report.written_count == 3
        assert list(recording_sink.files) == report.written

        bound, data = recording_rasterizer.calls[0]
        assert bound.elements[0].text == "Knight (3)"
        assert bound.elements[1].src == "/cards/images/knight.png"
        assert data["art"] == "/cards/images/knight.png"
        assert data["__lang"] == "en"

        source = sample_project.blueprints[0]
        assert source.elements[0].text == "{{ name }} ({{cost}})"
        assert source.elements[1].src == ""

    def test_missing_image_uses_placeholder(self, exporter, sample_project, recording_rasterizer):
        """测试缺失图片回退占位图，同一行只记录一次"""
        report = exporter.export(sample_project)

        assert [(m.row_id, m.expected) for m in report.missing_images] == [
            ("c2", "/cards/images/mage.png")
        ]
        _, data = recording_rasterizer.calls[1]
        assert data["art"] == "assets/images/placeholder.png"
        assert sample_project.data_tables[0].rows[1].data["art"] == "mage"

    def test_rasterize_error_recorded(self, make_rasterizer, recording_sink, fs, sample_project):
        """测试栅格化异常记为单行失败，批次继续"""
        exporter = BatchExporter(
            make_rasterizer(fail_on={"Knight"}), recording_sink, ImageReferenceResolver(fs)
        )
        report = exporter.export(sample_project)

        assert report.status == ExportStatus.COMPLETED
        assert report.written == ["Mage_c2_1.png", "Mage_c2_2.png"]
        assert report.skipped == 1
        assert [(f.row_id, f.error) for f in report.failures] == [("c1", "canvas lost")]

    def test_resolve_error_recorded(self, recording_rasterizer, recording_sink, fs, sample_project):
        """测试图片解析异常同样记为单行失败，批次继续"""
        class FlakyResolver(ImageReferenceResolver):
            def resolve(self, raw_value, binding=None, project_root=None):
                if raw_value == "mage":
                    raise PermissionError("access denied")
                return super().resolve(raw_value, binding, project_root)

        exporter = BatchExporter(recording_rasterizer, recording_sink, FlakyResolver(fs))
        report = exporter.export(sample_project)

        assert report.status == ExportStatus.COMPLETED
        assert report.written == ["Knight_c1.png"]
        assert report.skipped == 2
        assert [(f.row_id, f.error) for f in report.failures] == [
            ("c2", "access denied"),
            ("c2", "access denied"),
        ]

    def test_sink_error_fatal(self, recording_rasterizer, make_sink, fs, sample_project):
        """测试写出异常中止并记录到报告"""
        exporter = BatchExporter(recording_rasterizer, make_sink(fail_after=1), ImageReferenceResolver(fs))
        errors = []

        with pytest.raises(OSError):
            exporter.export(sample_project, callbacks=ExportCallbacks(on_error=errors.append))

        report = exporter.last_report
        assert report.status == ExportStatus.FAILED
        assert report.written == ["Knight_c1.png"]
        assert report.failures[-1].row_id == "unknown"
        assert report.failures[-1].error == "disk full"
        assert len(errors) == 1

    def test_no_blueprint(self, exporter):
        with pytest.raises(ExportError):
            exporter.export(Project())

    def test_no_table_exports_nothing(self, exporter, sample_project):
        project = sample_project.model_copy(update={"data_tables": []})
        report = exporter.export(project)
        assert report.status == ExportStatus.COMPLETED
        assert report.total == 0

    def test_art_override_wins(self, exporter, sample_project, recording_rasterizer):
        """测试行插图覆盖数据列"""
        table = sample_project.data_tables[0]
        row = DataRow(id="c3", data={"name": "Rogue", "art": "knight"}, art=ImageArt(src="https://cdn/r.png"))
        project = sample_project.model_copy(
            update={"data_tables": [table.model_copy(update={"rows": [row]})]}
        )

        exporter.export(project)

        bound, data = recording_rasterizer.calls[0]
        assert data["art"] == "https://cdn/r.png"
        assert bound.elements[1].src == "https://cdn/r.png"

    def test_video_without_poster_recorded(self, exporter, sample_project, recording_rasterizer):
        """测试无 poster 的视频插图记录缺失并使用占位图"""
        table = sample_project.data_tables[0]
        row = DataRow(id="c3", data={"name": "Clip"}, art=VideoArt(src="clip.mp4"))
        project = sample_project.model_copy(
            update={"data_tables": [table.model_copy(update={"rows": [row]})]}
        )

        report = exporter.export(project)

        assert ("c3", "poster") in [(m.row_id, m.expected) for m in report.missing_images]
        _, data = recording_rasterizer.calls[0]
        assert data["art"] == "assets/images/placeholder.png"

    def test_project_root_from_file_path(self, make_fs, recording_rasterizer, recording_sink, sample_project):
        """测试由项目文件路径推导项目根目录"""
        fs = make_fs(files={"/proj/assets/images/k.png"})
        table = sample_project.data_tables[0]
        row = DataRow(id="c1", data={"name": "K", "art": "assets/images/k.png"})
        project = sample_project.model_copy(
            update={"data_tables": [table.model_copy(update={"rows": [row]})]}
        )
        project.meta.file_path = "/proj/demo.cardforge.json"

        exporter = BatchExporter(recording_rasterizer, recording_sink, ImageReferenceResolver(fs))
        report = exporter.export(project)

        assert report.missing_images == []
        assert "/proj/assets/images/k.png" in fs.exists_calls

    def test_language_selection(self, exporter, sample_project, recording_rasterizer):
        """测试多语言字段按导出语言绑定"""
        table = sample_project.data_tables[0]
        row = DataRow(id="c1", data={"name": {"en": "Fire", "ar": "نار"}, "cost": 1})
        project = sample_project.model_copy(
            update={"data_tables": [table.model_copy(update={"rows": [row]})]}
        )

        exporter.export(project, options=ExportOptions(naming_template="{{id}}"), lang="ar")

        bound, data = recording_rasterizer.calls[0]
        assert bound.elements[0].text == "نار (1)"
        assert data["__lang"] == "ar"

    def test_cancel_delegates(self, exporter, sample_project, recording_sink):
        """测试取消委托给编排器"""
        recording_sink.after_write = lambda n: exporter.cancel()
        report = exporter.export(sample_project)

        assert report.status == ExportStatus.CANCELLED
        assert report.written == ["Knight_c1.png"]

    def test_busy_exporter_rejected(self, exporter, sample_project, recording_sink):
        """测试导出进行中再次启动被拒绝"""
        captured = []

        def _reenter(_n):
            with pytest.raises(ExportAlreadyRunningError):
                exporter.export(sample_project)
            captured.append(True)

        recording_sink.after_write = _reenter
        report = exporter.export(sample_project)

        assert report.status == ExportStatus.COMPLETED
        assert len(captured) == 3

    def test_defaults_from_runtime_config(self, recording_rasterizer, recording_sink, fs, sample_project):
        """测试未显式传入时，命名模板与扩展名取自运行期配置"""
        config = RuntimeConfig(export={"naming_template": "{{id}}", "extension": ".webp"})
        exporter = BatchExporter(
            recording_rasterizer, recording_sink, ImageReferenceResolver(fs), config=config
        )

        report = exporter.export(sample_project)

        assert report.written == ["c1.webp", "c2_1.webp", "c2_2.webp"]

    def test_resolver_defaults_from_config(self, recording_rasterizer, recording_sink):
        """测试未传入解析器时按配置的候选扩展名构造"""
        config = RuntimeConfig(image_binding={"extensions": [".webp"]})
        exporter = BatchExporter(recording_rasterizer, recording_sink, config=config)
        assert exporter.resolver.extensions == tuple(config.image_binding.extensions)
        assert exporter.extension == ".png"
