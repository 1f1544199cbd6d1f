"""
本地文件能力 - IFileSystem 的本机实现

职责：
1. 文件存在性探测
2. 独占复制（目标已存在时返回 EEXIST，不覆盖）
3. 将 OSError 映射为错误码返回，不抛异常

测试要点：
- test_copy_file_success: 正常复制并返回大小
- test_copy_file_exists: 目标已存在
- test_copy_file_missing_source: 源文件不存在
"""

from __future__ import annotations

import errno
import logging
import shutil
from pathlib import Path

from ..interfaces import COPY_FAILED, EEXIST, ENOENT, IFileSystem
from ..models import CopyFileResult

logger = logging.getLogger(__name__)


class LocalFileSystem(IFileSystem):
    """本地文件系统实现"""

    def file_exists(self, path: str) -> bool:
        """判断文件是否存在"""
        return Path(path).is_file()

    def copy_file(self, source_path: str, destination_path: str) -> CopyFileResult:
        """独占复制文件"""
        src = Path(source_path)
        dst = Path(destination_path)
        created = False
        try:
            with open(src, "rb") as fsrc:
                dst.parent.mkdir(parents=True, exist_ok=True)
                with open(dst, "xb") as fdst:
                    created = True
                    shutil.copyfileobj(fsrc, fdst)
            return CopyFileResult(ok=True, size=dst.stat().st_size)
        except FileExistsError:
            return CopyFileResult(ok=False, error=EEXIST)
        except FileNotFoundError:
            return CopyFileResult(ok=False, error=ENOENT)
        except OSError as e:
            logger.warning(f"文件复制失败: {src} -> {dst}: {e}")
            if created:
                dst.unlink(missing_ok=True)
            code = errno.errorcode.get(e.errno, COPY_FAILED) if e.errno else COPY_FAILED
            return CopyFileResult(ok=False, error=code)
