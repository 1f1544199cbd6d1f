import argparse
import logging
import sys
from pathlib import Path


def _add_backend_to_path() -> None:
    repo_root = Path(__file__).resolve().parents[1]
    backend_root = repo_root / "backend"
    if str(backend_root) not in sys.path:
        sys.path.insert(0, str(backend_root))


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Copy a table's referenced images into the project assets folder."
    )
    parser.add_argument("project", help="项目文件（.cardforge.json）")
    parser.add_argument("--table", default="", help="数据表ID（默认：第一个）")
    parser.add_argument(
        "--force",
        action="store_true",
        help="忽略数据表的 copyToAssets 设置强制复制",
    )
    parser.add_argument(
        "--no-save",
        action="store_true",
        help="复制图片但不回写项目文件",
    )
    parser.add_argument(
        "--config",
        default="config/cardforge_runtime.yaml",
        help="运行期配置（默认：config/cardforge_runtime.yaml）",
    )
    args = parser.parse_args()

    _add_backend_to_path()
    from cardforge.assets import ImageReferenceResolver, copy_referenced_images  # type: ignore
    from cardforge.config import reload_config  # type: ignore
    from cardforge.interfaces import ProjectFileError  # type: ignore
    from cardforge.storage import LocalFileSystem, load_project, save_project  # type: ignore

    config = reload_config(args.config)
    logging.basicConfig(
        level=config.logging.log_level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        handlers=config.build_log_handlers(),
    )

    project_path = Path(args.project).resolve()
    try:
        project = load_project(project_path, config.image_binding.column)
    except ProjectFileError as exc:
        print(f"项目文件错误: {exc}")
        return 1

    fs = LocalFileSystem()
    resolver = ImageReferenceResolver(fs, config.image_binding.extensions)
    updated, summary = copy_referenced_images(
        project,
        args.table or None,
        str(project_path.parent),
        resolver,
        fs,
        force=args.force,
        images_dir=config.assets.images_dir,
    )

    print(
        f"复制={summary.copied} 缺失={summary.missing} "
        f"失败={summary.failed} 跳过={summary.skipped}"
    )
    for item in summary.missing_images:
        print(f"  缺失 {item.row_id}: {item.expected}")
    for item in summary.failures:
        print(f"  失败 {item.row_id}: {item.error}")

    if summary.copied and not args.no_save:
        save_project(updated, project_path)
        print(f"已保存: {project_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
