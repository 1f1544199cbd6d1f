"""
配置加载单元测试

每个模块完成后必须运行：pytest backend/tests/unit/test_config.py -v
"""

import logging
from pathlib import Path

import pytest

from cardforge.config import RuntimeConfig, get_config, reload_config
from cardforge.config import runtime_config as runtime_config_module


RUNTIME_YAML = """\
runtime_options:
  export:
    naming_template:
      default: "{{name.en}}-{{copy}}"
      desc: 文件名模板
    pixel_ratio:
      default: 3
    fallback_name: card
  image_binding:
    column:
      default: media.front
    extensions: [.png, .webp]
  assets:
    images_dir: assets/cards
  logging:
    log_level:
      default: DEBUG
"""


class TestRuntimeConfig:
    """运行期配置测试"""

    def test_default_config(self, runtime_config: RuntimeConfig):
        """测试默认配置"""
        assert runtime_config.export.naming_template == "{{name}}_{{id}}"
        assert runtime_config.export.pixel_ratio == 2
        assert runtime_config.export.extension == ".png"
        assert runtime_config.image_binding.column == "art"
        assert runtime_config.image_binding.extensions == [".png", ".jpg", ".jpeg", ".webp"]
        assert runtime_config.assets.images_dir == "assets/images"
        assert runtime_config.logging.log_level == "INFO"

    def test_from_yaml(self, temp_dir: Path):
        """测试从YAML加载（支持 {default: ...} 写法）"""
        path = temp_dir / "cardforge_runtime.yaml"
        path.write_text(RUNTIME_YAML, encoding="utf-8")

        config = RuntimeConfig.from_yaml(path)

        assert config.export.naming_template == "{{name.en}}-{{copy}}"
        assert config.export.pixel_ratio == 3
        assert config.export.fallback_name == "card"
        assert config.image_binding.column == "media.front"
        assert config.image_binding.extensions == [".png", ".webp"]
        assert config.assets.images_dir == "assets/cards"
        assert config.logging.log_level == "DEBUG"
        assert config.runtime_spec_path == path
        assert config.logging.log_file == (temp_dir / "logs" / "cardforge.log").resolve()

    def test_missing_yaml_uses_defaults(self, temp_dir: Path):
        config = RuntimeConfig.from_yaml(temp_dir / "none.yaml")
        assert config.export.pixel_ratio == 2

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch):
        """测试环境变量覆盖"""
        monkeypatch.setenv("CARDFORGE_ASSETS__IMAGES_DIR", "media/cards")
        monkeypatch.setenv("CARDFORGE_EXPORT__PIXEL_RATIO", "4")

        config = RuntimeConfig()

        assert config.assets.images_dir == "media/cards"
        assert config.export.pixel_ratio == 4

    def test_default_export_options(self, runtime_config: RuntimeConfig):
        options = runtime_config.default_export_options()
        assert options.naming_template == runtime_config.export.naming_template
        assert options.pixel_ratio == 2
        assert options.fallback_name == "card"

    def test_env_overrides_yaml(self, temp_dir: Path, monkeypatch: pytest.MonkeyPatch):
        """测试环境变量优先于YAML，未覆盖的字段仍取YAML"""
        path = temp_dir / "cardforge_runtime.yaml"
        path.write_text(RUNTIME_YAML, encoding="utf-8")
        monkeypatch.setenv("CARDFORGE_EXPORT__PIXEL_RATIO", "4")
        monkeypatch.setenv("CARDFORGE_LOGGING__LOG_LEVEL", "WARNING")

        config = reload_config(path)

        assert config.export.pixel_ratio == 4
        assert config.export.naming_template == "{{name.en}}-{{copy}}"
        assert config.logging.log_level == "WARNING"
        assert config.image_binding.column == "media.front"

    def test_yaml_not_leaked_to_plain_config(self, temp_dir: Path):
        """测试 from_yaml 之后直接构造的配置不受该YAML影响"""
        path = temp_dir / "cardforge_runtime.yaml"
        path.write_text(RUNTIME_YAML, encoding="utf-8")
        RuntimeConfig.from_yaml(path)
        assert RuntimeConfig().export.pixel_ratio == 2

    def test_log_handlers_console_only(self, runtime_config: RuntimeConfig):
        handlers = runtime_config.build_log_handlers()
        assert len(handlers) == 1
        assert isinstance(handlers[0], logging.StreamHandler)

    def test_log_handlers_with_file(self, temp_dir: Path):
        """测试开启 log_to_file 时追加文件处理器并创建目录"""
        log_file = temp_dir / "logs" / "run.log"
        config = RuntimeConfig(logging={"log_to_file": True, "log_file": log_file})

        handlers = config.build_log_handlers()
        try:
            file_handlers = [h for h in handlers if isinstance(h, logging.FileHandler)]
            assert len(file_handlers) == 1
            assert Path(file_handlers[0].baseFilename) == log_file
            assert log_file.parent.is_dir()
        finally:
            for handler in handlers:
                handler.close()

    def test_reload_config(self, temp_dir: Path):
        path = temp_dir / "cardforge_runtime.yaml"
        path.write_text(RUNTIME_YAML, encoding="utf-8")
        assert reload_config(path).export.pixel_ratio == 3

    def test_get_config_lazy(self, temp_dir: Path, monkeypatch: pytest.MonkeyPatch):
        """测试全局配置惰性加载并缓存"""
        path = temp_dir / "cardforge_runtime.yaml"
        path.write_text(RUNTIME_YAML, encoding="utf-8")
        monkeypatch.setattr(runtime_config_module, "_config", None)
        monkeypatch.setattr(runtime_config_module, "DEFAULT_RUNTIME_PATH", path)

        first = get_config()

        assert first.export.pixel_ratio == 3
        assert get_config() is first
