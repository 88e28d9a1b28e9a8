"""
PDF页数统计（用于核对导出的标签PDF，支持目录批量统计）。
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path


def _add_backend_to_path() -> None:
    repo_root = Path(__file__).resolve().parents[1]
    backend_root = repo_root / "backend"
    if str(backend_root) not in sys.path:
        sys.path.insert(0, str(backend_root))


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--pdf", required=True, help="PDF文件或包含PDF的目录")
    args = ap.parse_args()

    _add_backend_to_path()
    from masterlabel.doc_gen import count_pdf_pages  # type: ignore

    target = Path(args.pdf)
    files = sorted(target.glob("*.pdf")) if target.is_dir() else [target]
    total = 0
    for path in files:
        n = count_pdf_pages(path)
        total += n
        if len(files) > 1:
            print(f"{path.name}: {n}")
    print(total)


if __name__ == "__main__":
    main()
