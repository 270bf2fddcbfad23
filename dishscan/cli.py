"""CLI entry point."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from .config import load_config
from .ingest import PhotoIngestor
from .models import LANGUAGES, Dish
from .normalizer import ResultNormalizer
from .presentation import (
    Layout,
    allergen_summary,
    result_header,
    select_layout,
    spice_meter,
)
from .progress import ScanProgressController
from .session import ScanRunner, ScanSession
from .vision import create_backend


def main(argv: list[str] | None = None) -> None:
    load_dotenv()

    parser = argparse.ArgumentParser(
        prog="dishscan",
        description="Photograph food or a menu and get a translated breakdown of each dish",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="Path to a TOML config file",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Log pipeline details"
    )

    sub = parser.add_subparsers(dest="command")

    # languages
    sub.add_parser("languages", help="List supported target languages")

    # scan
    scan_parser = sub.add_parser("scan", help="Analyze a food photo or menu")
    scan_parser.add_argument("image", type=str, help="Image file to analyze")
    scan_parser.add_argument(
        "--language", "-l", type=str, default=None, choices=LANGUAGES,
        help="Target language (defaults to the configured language)",
    )
    scan_parser.add_argument("--json", action="store_true", help="Output JSON")
    scan_parser.add_argument(
        "--save", type=int, nargs="+", default=[], metavar="N",
        help="Save the dishes at these 1-based positions",
    )
    scan_parser.add_argument(
        "--crops", type=str, default=None, metavar="DIR",
        help="Write a cropped thumbnail per dish (photo scans only)",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    match args.command:
        case "languages":
            _cmd_languages()
        case "scan":
            config = load_config(args.config)
            ok = asyncio.run(_cmd_scan(config, args))
            if not ok:
                sys.exit(1)


def _cmd_languages() -> None:
    for lang in LANGUAGES:
        print(lang)


def _print_progress(progress: ScanProgressController) -> None:
    print(
        f"\r{progress.status:<32} {progress.percent:>3}%",
        end="",
        file=sys.stderr,
        flush=True,
    )


async def _cmd_scan(config, args) -> bool:
    session = ScanSession(default_language=config.analysis.language)
    if args.language:
        session.set_target_language(args.language)

    save_dir = config.images.session_dir
    ingestor = PhotoIngestor(save_dir)
    pc = config.progress
    runner = ScanRunner(
        session=session,
        ingestor=ingestor,
        backend=create_backend(config),
        normalizer=ResultNormalizer(config.images.illustrative_url),
        progress_factory=lambda: ScanProgressController(
            tick_interval=pc.tick_interval,
            ceiling=pc.ceiling,
            completion_hold=pc.completion_hold,
            error_grace=pc.error_grace,
            on_change=None if args.json else _print_progress,
        ),
    )

    dishes = await runner.scan(args.image)
    if not args.json:
        print(file=sys.stderr)
    if dishes is None:
        print(f"Scan failed: {runner.last_error}", file=sys.stderr)
        return False

    for position in args.save:
        if 1 <= position <= len(dishes):
            session.toggle_save(dishes[position - 1].id)
        else:
            print(f"No dish at position {position}", file=sys.stderr)

    if args.crops and session.uploaded_image is not None:
        _export_crops(ingestor, session, dishes, Path(args.crops))

    if args.json:
        data = {
            "isMenu": bool(dishes) and dishes[0].is_menu,
            "language": session.target_language,
            "image": session.uploaded_image.url if session.uploaded_image else None,
            "sessionDir": save_dir,
            "dishes": [d.to_dict() for d in dishes],
            "saved": [s.to_dict() for s in session.saved.items],
        }
        print(json.dumps(data, ensure_ascii=False, indent=2))
    else:
        print(format_results(dishes, session.saved.ids))
    return True


def _export_crops(ingestor, session, dishes: list[Dish], out_dir: Path) -> None:
    for i, dish in enumerate(dishes, 1):
        if dish.is_menu or dish.bounding_box is None:
            continue
        dest = out_dir / f"dish_{i:02d}.jpg"
        try:
            ingestor.crop(session.uploaded_image, dish.bounding_box, dest)
            print(f"Crop saved: {dest}", file=sys.stderr)
        except ValueError as e:
            print(f"Skipping crop for {dish.name}: {e}", file=sys.stderr)


def format_results(dishes: list[Dish], saved_ids: list[str]) -> str:
    """Format scan results for terminal display."""
    title, count = result_header(dishes)
    lines: list[str] = [f"{title} ({count})"]

    if select_layout(dishes) is Layout.EMPTY:
        lines.append("No dishes were found in this image.")
        return "\n".join(lines)

    for i, dish in enumerate(dishes, 1):
        mark = " ★" if dish.id in saved_ids else ""
        lines.append("")
        if dish.original_name and dish.original_name != dish.name:
            lines.append(f"{i}. {dish.name} ({dish.original_name}) [{dish.category}]{mark}")
        else:
            lines.append(f"{i}. {dish.name} [{dish.category}]{mark}")
        lines.append(f"   {dish.description}")
        if dish.tags:
            lines.append(f"   Flavor: {', '.join(dish.tags)}")
        lines.append(
            f"   Spice: {spice_meter(dish)}  "
            f"Allergens: {allergen_summary(dish).label()}"
        )
        if dish.is_menu:
            lines.append(f"   Image: {dish.image}")
    return "\n".join(lines)
