"""
目录写出器 - IArtifactSink 的本机实现

将产物写入输出目录；产物可以是 bytes 或 base64 data URL
"""

from __future__ import annotations

import base64
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any
from urllib.parse import unquote_to_bytes

from ..interfaces import IArtifactSink

if TYPE_CHECKING:
    from ..models import ExportProgress

logger = logging.getLogger(__name__)


def data_url_to_bytes(data_url: str) -> bytes:
    """解码 data:...;base64,... 为字节"""
    header, sep, payload = data_url.partition(",")
    if not sep or not header.startswith("data:"):
        raise ValueError(f"无效的 data URL: {data_url[:32]}")
    if header.endswith(";base64"):
        return base64.b64decode(payload)
    return unquote_to_bytes(payload)


class DirectorySink(IArtifactSink):
    """按文件名写入输出目录"""

    def __init__(self, output_dir: str | Path):
        self.output_dir = Path(output_dir)

    def write(self, file_name: str, artifact: Any, progress: ExportProgress) -> None:
        """写出单个产物"""
        if isinstance(artifact, str):
            artifact = data_url_to_bytes(artifact)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        path = self.output_dir / file_name
        path.write_bytes(artifact)
        logger.debug(f"已写出 {path} ({progress.current}/{progress.total})")
