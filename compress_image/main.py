"""Точка входа: сжатие файлов из командной строки через `MemoryHost`."""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import mimetypes
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Set

from compress_image.controllers.item_controller import ItemProcessor
from compress_image.host.memory_host import MemoryHost
from compress_image.models.item_model import BinaryData, Item, ItemFailure

INPUT_SLOT = "data"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="compress-image",
        description="Compress, convert, and optionally resize images (JPEG/PNG/WebP/AVIF).",
    )
    parser.add_argument("inputs", nargs="+", type=Path, help="input image files")
    parser.add_argument("-o", "--output-dir", type=Path, default=Path("."), help="where to write results")
    parser.add_argument("-f", "--format", default="jpg", choices=["jpg", "jpeg", "png", "webp", "avif"])
    parser.add_argument("-q", "--quality", type=float, default=80, help="0-100; mapped to a compression level for PNG")
    parser.add_argument("--width", type=int, default=0, help="target width in pixels (0 = ignore)")
    parser.add_argument("--height", type=int, default=0, help="target height in pixels (0 = ignore)")
    parser.add_argument("--no-aspect", action="store_true", help="resize to the exact width and height")
    parser.add_argument("--allow-enlargement", action="store_true", help="allow upscaling beyond the original size")
    parser.add_argument("--keep-metadata", action="store_true", help="preserve EXIF/ICC/XMP metadata")
    parser.add_argument("--no-palette", action="store_true", help="do not quantize PNG output to a palette")
    parser.add_argument("--max-size-mb", type=float, default=25, help="reject inputs larger than this (1-512)")
    parser.add_argument("--continue-on-fail", action="store_true", help="keep going when a file fails")
    parser.add_argument("--json", action="store_true", help="print a JSON summary")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def _parameters(args: argparse.Namespace) -> Dict[str, Any]:
    return {
        "input_source": "binary",
        "binary_property_name": INPUT_SLOT,
        "output_binary_property_name": INPUT_SLOT,
        "format": args.format,
        "quality": args.quality,
        "strip_metadata": not args.keep_metadata,
        "png_palette": not args.no_palette,
        "max_input_size_mb": args.max_size_mb,
        "resize": {
            "width": args.width,
            "height": args.height,
            "maintain_aspect_ratio": not args.no_aspect,
            "allow_enlargement": args.allow_enlargement,
        },
    }


def _load_items(paths: Sequence[Path]) -> List[Item]:
    items: List[Item] = []
    for path in paths:
        mime, _ = mimetypes.guess_type(path.name)
        binary = BinaryData(
            data=path.read_bytes(),
            mime_type=mime,
            file_name=path.name,
            file_extension=path.suffix[1:] or None,
        )
        items.append(Item(json={"path": str(path)}, binary={INPUT_SLOT: binary}))
    return items


def _unique_target(output_dir: Path, file_name: str, written: Set[Path]) -> Path:
    """Путь для результата; при совпадении имён в одном запуске добавляет `-1`, `-2`, ..."""
    target = output_dir / file_name
    counter = 1
    while target in written:
        target = output_dir / f"{Path(file_name).stem}-{counter}{Path(file_name).suffix}"
        counter += 1
    written.add(target)
    return target


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Разбирает аргументы, сжимает файлы и пишет результаты в `--output-dir`."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    missing = [str(p) for p in args.inputs if not p.is_file()]
    if missing:
        print(f"error: file not found: {', '.join(missing)}", file=sys.stderr)
        return 2

    host = MemoryHost(_load_items(args.inputs), _parameters(args), continue_on_fail=args.continue_on_fail)
    processor = ItemProcessor()

    async def collect() -> list:
        return [result async for result in processor.iter_results(host)]

    results = asyncio.run(collect())
    args.output_dir.mkdir(parents=True, exist_ok=True)

    report = []
    failed = False
    written: Set[Path] = set()
    for result in results:
        source = str(args.inputs[result.index])
        if isinstance(result, ItemFailure):
            failed = True
            report.append({"input": source, "error": result.error.message})
            continue
        stored = result.item.binary[INPUT_SLOT]
        target = _unique_target(args.output_dir, stored.file_name or f"image-{result.index}", written)
        target.write_bytes(stored.data)
        report.append({"input": source, "output": str(target), **result.item.json["compression"]})

    if args.json:
        print(json.dumps(report, indent=2))
    else:
        for entry in report:
            if "error" in entry:
                print(f"FAIL {entry['input']}: {entry['error']}", file=sys.stderr)
            else:
                print(
                    f"OK {entry['input']} -> {entry['output']}  "
                    f"{entry['originalSize'] / 1024:.0f}KB -> {entry['newSize'] / 1024:.0f}KB  "
                    f"({entry['percentReduction']:.1f}%)"
                )
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
