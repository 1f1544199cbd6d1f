"""
运行期配置 - 读取 config/cardforge_runtime.yaml

职责：
- 加载导出默认值/图片绑定/素材目录/日志等运行参数
- 提供环境变量覆盖机制（CARDFORGE_ 前缀，优先级高于 YAML）
- 类型安全的配置访问

优先级：初始化参数 > 环境变量 > YAML > 默认值
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic.fields import FieldInfo
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from ..models import DEFAULT_IMAGE_COLUMN, DEFAULT_NAMING_TEMPLATE, ExportOptions

DEFAULT_RUNTIME_PATH = Path("config/cardforge_runtime.yaml")

RUNTIME_SECTIONS = ("export", "image_binding", "assets", "logging")

# 当前正在加载的 YAML 文件（仅在 from_yaml 期间设置）
_active_yaml: ContextVar[Path | None] = ContextVar("cardforge_runtime_yaml", default=None)


class ExportDefaultsConfig(BaseModel):
    """导出默认值"""

    naming_template: str = DEFAULT_NAMING_TEMPLATE
    pixel_ratio: float = 2
    fallback_name: str = "card"
    extension: str = ".png"


class ImageBindingDefaultsConfig(BaseModel):
    """图片绑定默认值（column 用于补齐未声明图片列的数据表）"""

    column: str = DEFAULT_IMAGE_COLUMN
    extensions: list[str] = Field(
        default_factory=lambda: [".png", ".jpg", ".jpeg", ".webp"]
    )


class AssetsConfig(BaseModel):
    """项目素材目录配置"""

    images_dir: str = "assets/images"


class LoggingConfig(BaseModel):
    """日志配置"""

    log_level: str = "INFO"
    log_to_file: bool = False
    log_file: Path = Path("logs/cardforge.log")


def _extract(data: dict[str, Any], key: str) -> dict[str, Any]:
    """提取并展平配置（支持 {default: ...} 写法）"""
    section = data.get(key) or {}
    result = {}
    for k, v in section.items():
        if isinstance(v, dict) and "default" in v:
            result[k] = v["default"]
        elif not isinstance(v, dict):
            result[k] = v
    return result


def load_runtime_options(yaml_path: Path) -> dict[str, Any]:
    """读取 runtime_options 并按子配置展平"""
    with open(yaml_path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    runtime_opts = data.get("runtime_options") or {}
    return {
        key: _extract(runtime_opts, key)
        for key in RUNTIME_SECTIONS
        if runtime_opts.get(key)
    }


class RuntimeYamlSettingsSource(PydanticBaseSettingsSource):
    """YAML 配置源（排在环境变量之后）"""

    def __init__(self, settings_cls: type[BaseSettings], yaml_path: Path | None):
        super().__init__(settings_cls)
        self.yaml_path = yaml_path
        self._data: dict[str, Any] = {}
        if yaml_path is not None and yaml_path.exists():
            self._data = load_runtime_options(yaml_path)

    def get_field_value(self, field: FieldInfo, field_name: str) -> tuple[Any, str, bool]:
        return self._data.get(field_name), field_name, False

    def __call__(self) -> dict[str, Any]:
        return {key: dict(value) for key, value in self._data.items()}


class RuntimeConfig(BaseSettings):
    """运行期配置（支持环境变量覆盖）"""

    runtime_spec_path: Path = DEFAULT_RUNTIME_PATH

    # 各子配置
    export: ExportDefaultsConfig = Field(default_factory=ExportDefaultsConfig)
    image_binding: ImageBindingDefaultsConfig = Field(default_factory=ImageBindingDefaultsConfig)
    assets: AssetsConfig = Field(default_factory=AssetsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {
        "env_prefix": "CARDFORGE_",
        "env_nested_delimiter": "__",
        "arbitrary_types_allowed": True,
    }

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            RuntimeYamlSettingsSource(settings_cls, _active_yaml.get()),
            file_secret_settings,
        )

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> RuntimeConfig:
        """从YAML文件加载配置（环境变量仍可覆盖）"""
        path = Path(yaml_path)
        if not path.exists():
            return cls()

        token = _active_yaml.set(path)
        try:
            config = cls(runtime_spec_path=path)
        finally:
            _active_yaml.reset(token)

        config._resolve_paths(base_dir=path.parent)
        return config

    def _resolve_paths(self, base_dir: Path) -> None:
        """解析相对日志文件路径为绝对路径（基于配置文件所在目录）"""
        if not self.logging.log_file.is_absolute():
            self.logging.log_file = (base_dir / self.logging.log_file).resolve()

    def default_export_options(self) -> ExportOptions:
        """按配置构造默认导出选项"""
        return ExportOptions(
            naming_template=self.export.naming_template,
            pixel_ratio=self.export.pixel_ratio,
            fallback_name=self.export.fallback_name,
        )

    def build_log_handlers(self) -> list[logging.Handler]:
        """构造日志处理器：控制台，开启 log_to_file 时追加文件"""
        handlers: list[logging.Handler] = [logging.StreamHandler()]
        if self.logging.log_to_file:
            log_file = self.logging.log_file
            log_file.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
        return handlers


# 全局配置实例
_config: RuntimeConfig | None = None


def get_config() -> RuntimeConfig:
    """获取全局配置（惰性加载）"""
    global _config
    if _config is None:
        _config = RuntimeConfig.from_yaml(DEFAULT_RUNTIME_PATH)
    return _config


def reload_config(yaml_path: str | Path | None = None) -> RuntimeConfig:
    """重新加载配置"""
    global _config
    path = yaml_path or DEFAULT_RUNTIME_PATH
    _config = RuntimeConfig.from_yaml(path)
    return _config
