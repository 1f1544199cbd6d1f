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
        description="Print the file names an export run would produce."
    )
    parser.add_argument("project", help="项目文件（.cardforge.json）")
    parser.add_argument("--table", default="", help="数据表ID（默认：第一个）")
    parser.add_argument(
        "--template",
        default="",
        help="命名模板（默认：配置文件中的 export.naming_template）",
    )
    parser.add_argument(
        "--config",
        default="config/cardforge_runtime.yaml",
        help="运行期配置（默认：config/cardforge_runtime.yaml）",
    )
    args = parser.parse_args()

    _add_backend_to_path()
    from cardforge.config import reload_config  # type: ignore
    from cardforge.interfaces import ProjectFileError  # type: ignore
    from cardforge.pipeline import plan_file_names  # type: ignore
    from cardforge.storage import load_project  # type: ignore

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

    options = config.default_export_options()
    if args.template:
        options = options.model_copy(update={"naming_template": args.template})

    plan = plan_file_names(table.rows, options, config.export.extension)
    for row_id, copy_index, file_name in plan:
        print(f"{row_id}#{copy_index}\t{file_name}")
    print(f"共 {len(plan)} 个产物（数据表 {table.id}）")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
