"""
Command line entry point.

Loads a document JSON file, turns the chosen command into a host message,
runs it through the engine and prints the responses as JSON. Commands that
change the document write it back (in place, or to --output).

Examples:
    icon-toolkit design.json scan
    icon-toolkit design.json consolidate --scope current-page --current-page "Page 1"
    icon-toolkit design.json library-duplicates
    icon-toolkit design.json convert 1:42 -o converted.json
    icon-toolkit design.json previews 1:42 1:43 --preview-dir previews/
    icon-toolkit design.json swap 1:42 1:7 --keep-size
    icon-toolkit design.json add-icon arrow-left.json --size 24 24
"""

from __future__ import annotations

import argparse
import base64
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from icon_toolkit.common.thresholds import (
    ClassifierThresholds,
    ClusteringThresholds,
    DiscoveryLimits,
    LibraryLayout,
)
from icon_toolkit.core.schemas import ValidationError
from icon_toolkit.core.utils.serialization import load_document, save_document, serialize_candidates
from icon_toolkit.discovery import ScanError
from icon_toolkit.engine import EngineConfig, EngineContext, MarkingStore, handle_message

logger = logging.getLogger(__name__)

# Commands that change the document
MUTATING_COMMANDS = {"consolidate", "library-duplicates", "convert", "replace", "rename", "swap", "add-icon"}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="icon-toolkit",
        description="Discover, analyze and consolidate icons in a design document",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  scan                 List discovered icons with consistency findings
  consolidate          Create masters for unresolved icons and replace duplicates
  library-duplicates   Remove duplicates on the icon library page
  convert ID           Convert one icon to a master component
  replace ID MASTER    Replace an icon with an instance of MASTER
  rename ID            Give an icon a clean generated name
  previews ID...       Render PNG previews
  ignore / unignore ID Hide or restore an icon in future scans
  mark ID TYPE         Mark an icon (ignore, swap, unmark)
  swap ID REPLACEMENT  Replace an icon and all its uses with REPLACEMENT
  add-icon FILE        Add an imported icon (node JSON) to the library page
        """,
    )
    parser.add_argument("document", type=Path, help="Document JSON file")
    parser.add_argument("-o", "--output", type=Path, help="Write the changed document here (default: in place)")
    parser.add_argument("--markings", type=Path, help="Markings JSON file (default: in memory)")
    parser.add_argument("--timing", type=Path, help="Merge scan timings into this JSON file")
    parser.add_argument("--similarity-threshold", type=float, help="Pass-2 merge threshold (0-100)")
    parser.add_argument("--max-pages", type=int, help="Maximum pages to scan")
    parser.add_argument("--max-candidates", type=int, help="Maximum icons per scan")
    parser.add_argument("--library-page", help="Name of the icon library page")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("scan")

    consolidate = commands.add_parser("consolidate")
    consolidate.add_argument("--scope", choices=["all-pages", "current-page"], default="all-pages")
    consolidate.add_argument("--current-page", help="Page used by --scope current-page")

    commands.add_parser("library-duplicates")

    convert = commands.add_parser("convert")
    convert.add_argument("icon_id")

    replace = commands.add_parser("replace")
    replace.add_argument("icon_id")
    replace.add_argument("master_id")

    rename = commands.add_parser("rename")
    rename.add_argument("icon_id")

    previews = commands.add_parser("previews")
    previews.add_argument("icon_ids", nargs="+")
    previews.add_argument("--preview-dir", type=Path, help="Also write each preview as <id>.png")

    for name in ("ignore", "unignore"):
        commands.add_parser(name).add_argument("icon_id")

    mark = commands.add_parser("mark")
    mark.add_argument("icon_id")
    mark.add_argument("mark_type", choices=["ignore", "swap", "unmark"])

    swap = commands.add_parser("swap")
    swap.add_argument("icon_id")
    swap.add_argument("replacement_id")
    swap.add_argument("--keep-size", action="store_true", help="Keep the replacement's size instead of scaling to fit")
    swap.add_argument("--convert", action="store_true", help="Promote a non-master replacement to a master first")

    add_icon = commands.add_parser("add-icon")
    add_icon.add_argument("icon_file", type=Path, help="JSON file holding the icon's node tree")
    add_icon.add_argument("--name", help="File name used for the master name (default: the JSON file's stem)")
    add_icon.add_argument("--size", type=float, nargs=2, metavar=("WIDTH", "HEIGHT"), help="Master size")
    return parser


def build_config(args: argparse.Namespace) -> EngineConfig:
    """Apply flag overrides on top of the default thresholds."""
    clustering = ClusteringThresholds()
    if args.similarity_threshold is not None:
        clustering = ClusteringThresholds(similarity_threshold=args.similarity_threshold)

    limits = DiscoveryLimits()
    if args.max_pages is not None or args.max_candidates is not None:
        limits = DiscoveryLimits(
            max_pages=args.max_pages or limits.max_pages,
            max_candidates=args.max_candidates or limits.max_candidates,
        )

    layout = LibraryLayout(page_name=args.library_page) if args.library_page else LibraryLayout()
    return EngineConfig(
        classifier=ClassifierThresholds(),
        limits=limits,
        clustering=clustering,
        layout=layout,
        timing_path=args.timing,
    )


def _scanned_icons(engine: EngineContext) -> List[Dict[str, Any]]:
    """Candidates from a fresh scan, ignored icons excluded."""
    result = engine.scan()
    return serialize_candidates(c for c in result.discovered_icons if not c.is_ignored)


def build_message(args: argparse.Namespace, engine: EngineContext) -> Dict[str, Any]:
    command = args.command
    if command == "scan":
        return {"type": "scan"}
    if command == "consolidate":
        data: Dict[str, Any] = {"icons": _scanned_icons(engine), "scope": args.scope}
        if args.current_page:
            data["currentPageName"] = args.current_page
        return {"type": "consolidate", "data": data}
    if command == "library-duplicates":
        return {
            "type": "consolidate-library-duplicates",
            "data": {"icons": _scanned_icons(engine), "currentPageName": engine.config.layout.page_name},
        }
    if command == "convert":
        return {"type": "convert-single-icon", "data": {"icon": {"id": args.icon_id}}}
    if command == "replace":
        return {
            "type": "replace-with-instance",
            "data": {"icon": {"id": args.icon_id}, "master": {"id": args.master_id}},
        }
    if command == "rename":
        return {"type": "smart-rename-icon", "data": {"iconId": args.icon_id}}
    if command == "previews":
        return {"type": "generate-previews", "data": {"iconIds": args.icon_ids}}
    if command in ("ignore", "unignore"):
        return {"type": f"{command}-icon", "data": {"iconId": args.icon_id}}
    if command == "mark":
        return {"type": "mark-icon", "data": {"iconId": args.icon_id, "markType": args.mark_type}}
    if command == "swap":
        return {
            "type": "swap-icons",
            "data": {
                "originalIcon": {"id": args.icon_id},
                "replacementIcon": {"id": args.replacement_id},
                "sizingMode": "keep-size" if args.keep_size else "scale-to-fit",
                "needsConversion": args.convert,
            },
        }
    if command == "add-icon":
        with open(args.icon_file, "r", encoding="utf-8") as f:
            icon = json.load(f)
        data = {"icon": icon, "fileName": args.name or args.icon_file.stem}
        if args.size:
            data["expectedSize"] = {"width": args.size[0], "height": args.size[1]}
        return {"type": "add-icon-to-library", "data": data}
    raise ValueError(f"Unknown command: {command}")


def write_previews(previews: Dict[str, str], directory: Path) -> None:
    directory.mkdir(parents=True, exist_ok=True)
    for icon_id, uri in previews.items():
        png = base64.b64decode(uri.split(",", 1)[1])
        target = directory / f"{icon_id.replace(':', '_')}.png"
        target.write_bytes(png)
        logger.info(f"Wrote preview {target}")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    try:
        document = load_document(args.document)
        config = build_config(args)
    except (OSError, ValidationError, ValueError) as e:
        logger.error(f"Could not load {args.document}: {e}")
        return 2

    with EngineContext(document, config=config, store=MarkingStore(args.markings)) as engine:
        try:
            message = build_message(args, engine)
        except ScanError as e:
            logger.error(f"Scan failed: {e}")
            return 1
        except (OSError, ValueError) as e:
            logger.error(f"Could not build request: {e}")
            return 2
        responses = handle_message(engine, message)

    final = responses[-1]
    print(json.dumps(responses, indent=2, ensure_ascii=False))

    if final["type"].endswith("-error"):
        return 1
    if args.command == "previews" and args.preview_dir:
        write_previews(final["data"]["previews"], args.preview_dir)
    if args.command in MUTATING_COMMANDS:
        save_document(document, args.output or args.document)
    return 0


if __name__ == "__main__":
    sys.exit(main())
