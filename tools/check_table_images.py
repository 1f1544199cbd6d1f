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
        description="Resolve every row's bound image and report missing ones."
    )
    parser.add_argument("project", help="项目文件（.cardforge.json）")
    parser.add_argument("--table", default="", help="数据表ID（默认：第一个）")
    parser.add_argument(
        "--config",
        default="config/cardforge_runtime.yaml",
        help="运行期配置（默认：config/cardforge_runtime.yaml）",
    )
    args = parser.parse_args()

    _add_backend_to_path()
    from cardforge.assets import ImageReferenceResolver  # type: ignore
    from cardforge.binding import resolve_path  # type: ignore
    from cardforge.config import reload_config  # type: ignore
    from cardforge.interfaces import ProjectFileError  # type: ignore
    from cardforge.storage import LocalFileSystem, get_parent_path, load_project  # type: ignore

    config = reload_config(args.config)
    logging.basicConfig(
        level=config.logging.log_level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        handlers=config.build_log_handlers(),
    )

    try:
        project = load_project(args.project, config.image_binding.column)
    except ProjectFileError as exc:
        print(f"项目文件错误: {exc}")
        return 1

    table = project.get_table(args.table or None)
    if table is None:
        print("项目中没有数据表")
        return 1

    resolver = ImageReferenceResolver(LocalFileSystem(), config.image_binding.extensions)
    project_root = get_parent_path(str(Path(args.project).resolve()))
    binding = table.image_binding

    missing = 0
    for row in table.rows:
        raw = row.art if row.art is not None else resolve_path(row.data, binding.column)
        result = resolver.resolve(raw, binding, project_root)
        if result.missing:
            missing += 1
            print(f"{row.id}: MISSING expected={result.expected}")
        else:
            print(f"{row.id}: {result.resolved}")

    print(f"行数={len(table.rows)} 缺失={missing}")
    return 1 if missing else 0


if __name__ == "__main__":
    raise SystemExit(main())
