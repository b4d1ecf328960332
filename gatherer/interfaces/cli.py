from __future__ import annotations

import argparse
import asyncio
import io
import json
import sys
import traceback
from typing import Any, Dict, List

from gatherer.adapters.sinks import BufferSink
from gatherer.application.session import STATUS_SELECT_EXTENSION, GatherSession
from gatherer.core.extensions import coerce_extension
from gatherer.exceptions import GathererError
from gatherer.logging import log_crash
from gatherer.services import exporter


def _extension_arg(raw: str) -> str:
    try:
        return coerce_extension(raw)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gatherer",
        description="Gather source files under a directory into one delimited text file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    scan = subparsers.add_parser("scan", help="List the text/source extensions found under a directory.")
    scan.add_argument("root", help="Root directory to scan.")
    scan.add_argument("--json", action="store_true", help="Print the result as JSON.")

    export = subparsers.add_parser("export", help="Concatenate files with the selected extensions.")
    export.add_argument("root", help="Root directory to export.")
    selection = export.add_mutually_exclusive_group(required=True)
    selection.add_argument(
        "--ext",
        nargs="+",
        default=[],
        type=_extension_arg,
        help="Extensions to include, e.g. --ext .py md.",
    )
    selection.add_argument("--all", action="store_true", help="Include every extension found by a scan.")
    target = export.add_mutually_exclusive_group()
    target.add_argument("--output", default="", help="Output file (default: <output dir>/<root>_<date>_<time>.txt).")
    target.add_argument("--clipboard", action="store_true", help="Copy the export to the clipboard.")
    target.add_argument("--stdout", action="store_true", help="Print the export instead of writing it.")
    export.add_argument("--json", action="store_true", help="Print the result as JSON.")
    return parser


async def _scan(args: argparse.Namespace) -> Dict[str, Any]:
    session = GatherSession()
    session.set_root(args.root)
    result = await session.scan()
    result["status"] = session.status_message
    return result


async def _export(args: argparse.Namespace) -> Dict[str, Any]:
    session = GatherSession()
    session.set_root(args.root)
    if args.output:
        session.set_output(args.output)

    scanned = await session.scan()
    if not scanned.get("ok"):
        return {**scanned, "status": session.status_message}

    requested: List[str] = [] if args.all else sorted(set(args.ext))
    if args.all:
        session.select_all()
    else:
        session.select_only(requested)
    found = set(scanned.get("extensions") or [])
    missing = [ext for ext in requested if ext not in found]

    if args.stdout:
        selected = session.selected_extensions()
        if not selected:
            return {"ok": False, "error": STATUS_SELECT_EXTENSION, "not_found": missing}
        sink = BufferSink()
        try:
            summary = await exporter.export(session.root_path, selected, sink)
        except GathererError as exc:
            return {"ok": False, "error": str(exc)}
        return {"ok": True, "summary": summary, "content": sink.getvalue(), "not_found": missing}

    if args.clipboard:
        result = await session.export_to_clipboard()
    else:
        result = await session.export_to_file()
    result["status"] = session.status_message
    result["not_found"] = missing
    return result


def _render_human(command: str, result: Dict[str, Any]) -> str:
    if not result.get("ok"):
        lines = [f"Error: {result.get('error')}"]
        if result.get("status"):
            lines.append(str(result["status"]))
        return "\n".join(lines)

    if command == "scan":
        return "\n".join([*result.get("extensions", []), str(result.get("status") or "")])

    summary = result["summary"]
    lines = []
    for ext in result.get("not_found") or []:
        lines.append(f"Note: no {ext} files were found by the scan.")
    lines.append(f"Wrote {summary.files_written} file(s) to {summary.destination}.")
    if summary.files_failed:
        lines.append(f"{summary.files_failed} file(s) could not be read; see the error placeholders.")
    lines.append(str(result.get("status") or ""))
    return "\n".join(lines)


def _jsonable(result: Dict[str, Any]) -> Dict[str, Any]:
    payload = dict(result)
    if "summary" in payload:
        payload["summary"] = payload["summary"].model_dump()
    return payload


async def run_cli(args: argparse.Namespace) -> int:
    if args.command == "scan":
        result = await _scan(args)
    else:
        result = await _export(args)

    if bool(getattr(args, "json", False)):
        print(json.dumps(_jsonable(result), indent=2, ensure_ascii=False))
    elif args.command == "export" and args.stdout and result.get("ok"):
        sys.stdout.write(result["content"])
    else:
        print(_render_human(args.command, result))
    return 0 if bool(result.get("ok")) else 1


def main(argv: List[str] | None = None) -> int:
    # Force UTF-8
    if sys.platform == "win32":
        sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding="utf-8")
        sys.stderr = io.TextIOWrapper(sys.stderr.buffer, encoding="utf-8")

    args = _parser().parse_args(argv)
    try:
        return asyncio.run(run_cli(args))
    except KeyboardInterrupt:
        print("\n[HALT] Interrupted by user.")
        return 130
    except (RuntimeError, ValueError, OSError, TypeError) as e:
        log_crash(e, traceback.format_exc())
        raise


if __name__ == "__main__":
    raise SystemExit(main())
