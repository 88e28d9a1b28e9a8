import argparse
import json
import sys
from pathlib import Path


def _add_backend_to_path() -> None:
    repo_root = Path(__file__).resolve().parents[1]
    backend_root = repo_root / "backend"
    if str(backend_root) not in sys.path:
        sys.path.insert(0, str(backend_root))


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Render a master label (design + product/batch JSON) to PDF."
    )
    parser.add_argument("--data", required=True, help="组装参数JSON（product/batch/suppliers/variant）")
    parser.add_argument("--design", default="", help="设计文件（YAML/JSON）；缺省使用产品组内置模板")
    parser.add_argument("--out-dir", default="storage/labels", help="输出目录（默认：storage/labels）")
    parser.add_argument("--count", type=int, default=1, help="份数（>1 时启用批量导出）")
    parser.add_argument("--start", type=int, default=1, help="起始序号")
    parser.add_argument("--format", default="x-of-y", help="计数格式（x-of-y/x-slash-y/package-x-of-y/...）")
    parser.add_argument("--pattern", choices=["single", "batch"], default="batch", help="single=单文档多页，batch=每份一个PDF")
    parser.add_argument("--locale", default="", help="计数文案语言（en/de；缺省取运行期配置 render.default_locale）")
    parser.add_argument("--serial", default="", help="DPP链接中的序列号")
    parser.add_argument("--no-delay", action="store_true", help="逐份导出时不等待")
    args = parser.parse_args()

    _add_backend_to_path()
    from masterlabel.assembly import LabelDataAssembler, attach_dpp_qr  # type: ignore
    from masterlabel.config import configure_logging, get_config, load_design, load_rules  # type: ignore
    from masterlabel.doc_gen import DocumentRenderer, get_default_design_for_group  # type: ignore
    from masterlabel.interfaces import MasterLabelError  # type: ignore
    from masterlabel.models import AssembleParams, MultiLabelExportConfig  # type: ignore
    from masterlabel.validation import DesignValidator  # type: ignore

    config = get_config()
    configure_logging(config.logging)

    with open(args.data, "r", encoding="utf-8") as f:
        params = AssembleParams.model_validate(json.load(f))

    params, qr_failed = attach_dpp_qr(params, args.serial, qr_settings=config.qr)
    if qr_failed:
        print("二维码生成失败（继续渲染）")

    rules = load_rules(config.rules_path)
    data = LabelDataAssembler(rules).assemble(params)
    design = load_design(args.design) if args.design else get_default_design_for_group(data.product_group)

    validator = DesignValidator(rules)
    for result in [*validator.validate_data(data), *validator.validate_design(design)]:
        print(f"[{result.severity}] {result.field}: {result.message}")

    export_config = None
    if args.count > 1:
        export_config = MultiLabelExportConfig(
            label_count=args.count,
            start_number=args.start,
            format=args.format,
            filename_pattern=args.pattern,
            locale=args.locale,
        )

    out_dir = Path(args.out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    def write(document) -> None:
        path = out_dir / document.filename
        path.write_bytes(document.content)
        print(f"{path} ({document.page_count}页)")

    renderer = DocumentRenderer(delay_ms=0 if args.no_delay else None)
    try:
        renderer.render(design, data, export_config, sink=write)
    except MasterLabelError as exc:
        print(f"渲染失败: {exc}")
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
