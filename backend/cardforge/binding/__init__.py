"""
绑定层 - 路径解析、占位符替换与文件名规则

子模块：
- path_resolver: 点路径读写
- templating: 元素绑定与值字符串化
- filenames: 文件名清洗与命名模板
"""

from .filenames import (
    FALLBACK_FILE_NAME,
    MAX_FILE_NAME_LENGTH,
    apply_naming_template,
    sanitize_file_name,
    template_references_copy,
)
from .path_resolver import resolve_path, set_path_value
from .templating import (
    PLACEHOLDER_PATTERN,
    apply_bindings_to_blueprint,
    apply_bindings_to_elements,
    replace_placeholders,
    resolve_image_binding_value,
    resolve_localized_value,
    stringify_value,
)

__all__ = [
    "resolve_path",
    "set_path_value",
    "PLACEHOLDER_PATTERN",
    "stringify_value",
    "resolve_localized_value",
    "replace_placeholders",
    "resolve_image_binding_value",
    "apply_bindings_to_elements",
    "apply_bindings_to_blueprint",
    "FALLBACK_FILE_NAME",
    "MAX_FILE_NAME_LENGTH",
    "sanitize_file_name",
    "apply_naming_template",
    "template_references_copy",
]
