"""
路径工具 - 与平台无关的字符串路径拼接

项目文件中的路径可能来自 Windows（反斜杠）或 POSIX，
拼接时沿用 base 的分隔符风格
"""

from __future__ import annotations


def join_path(base: str, name: str) -> str:
    """拼接路径，沿用 base 的分隔符"""
    if not base:
        return name
    sep = "\\" if "\\" in base else "/"
    normalized = base[:-1] if base.endswith(sep) else base
    return f"{normalized}{sep}{name}"


def get_parent_path(path: str) -> str:
    """上级目录（无分隔符时返回空串）"""
    normalized = path.rstrip("/\\")
    idx = max(normalized.rfind("/"), normalized.rfind("\\"))
    return normalized[:idx] if idx > 0 else normalized[: idx + 1]


def get_file_name(path: str) -> str:
    """取路径中的文件名"""
    if not path:
        return ""
    normalized = path.replace("\\", "/")
    return normalized.rsplit("/", 1)[-1]


def get_extension(file_name: str) -> str:
    """取扩展名（小写，含点）；点在首位或不存在时返回空串"""
    idx = file_name.rfind(".")
    if idx <= 0:
        return ""
    return file_name[idx:].lower()
