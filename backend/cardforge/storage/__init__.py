"""
存储层 - 路径工具、本地文件能力与项目文件读写

子模块：
- paths: 字符串路径拼接
- local_fs: 本地文件存在性探测与独占复制
- sink: 产物写出到目录
- project_file: 项目文件解析/序列化
"""

from .local_fs import LocalFileSystem
from .paths import get_extension, get_file_name, get_parent_path, join_path
from .project_file import load_project, parse_project, save_project, stringify_project
from .sink import DirectorySink, data_url_to_bytes

__all__ = [
    "join_path",
    "get_parent_path",
    "get_file_name",
    "get_extension",
    "LocalFileSystem",
    "DirectorySink",
    "data_url_to_bytes",
    "parse_project",
    "stringify_project",
    "load_project",
    "save_project",
]
