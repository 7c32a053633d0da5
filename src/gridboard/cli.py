"""gridboard command-line interface."""

from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from pathlib import Path
from typing import Optional, Sequence

import structlog

from .board import BoardDecodeError
from .io import load_draft, load_json, save_json


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="gridboard CLI")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log debug events")
    sub = parser.add_subparsers(dest="command", required=True)

    validate = sub.add_parser("validate", help="Validate a board file")
    validate.add_argument("--in", dest="input_path", required=True)
    validate.add_argument("--out", dest="output_path")

    build = sub.add_parser("build", help="Build a board from a draft file")
    build.add_argument("--in", dest="input_path", required=True)
    build.add_argument("--out", dest="output_path", required=True)
    build.add_argument("--render-out", dest="render_path")
    build.add_argument("--arrow-offset", type=float)

    import_cmd = sub.add_parser("import", help="Extract boards from a .glb line mesh")
    import_cmd.add_argument("--in", dest="input_path", required=True)
    import_cmd.add_argument("--out-dir", dest="output_dir", default="exports")
    import_cmd.add_argument("--render", action="store_true", help="Also write a PNG per board")

    render = sub.add_parser("render", help="Render a board to PNG")
    render.add_argument("--in", dest="input_path", required=True)
    render.add_argument("--out", dest="output_path", required=True)

    capacity = sub.add_parser("capacity", help="Print a board's capacity")
    capacity.add_argument("--in", dest="input_path", required=True)

    return parser


def configure_logging(verbose: bool = False) -> None:
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if verbose else logging.WARNING
        ),
        cache_logger_on_first_use=False,
    )


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if args.command == "validate":
        _cmd_validate(args)

    elif args.command == "build":
        _cmd_build(args)

    elif args.command == "import":
        _cmd_import(args)

    elif args.command == "render":
        from .render import render_png
        board = _load_or_exit(args.input_path)
        render_png(board, args.output_path)
        print(f"Saved {args.output_path}")

    elif args.command == "capacity":
        board = _load_or_exit(args.input_path)
        print(board.capacity())


def _load_or_exit(path: str):
    try:
        return load_json(path)
    except BoardDecodeError as exc:
        print(exc)
        raise SystemExit(1)


def _cmd_validate(args) -> None:
    board = _load_or_exit(args.input_path)
    errors = board.validate()
    if errors:
        for error in errors:
            print(error)
        raise SystemExit(1)
    if args.output_path:
        save_json(board, args.output_path)
    print("OK")


def _cmd_build(args) -> None:
    from .synthesis import default_config

    try:
        draft = load_draft(args.input_path)
    except (ValueError, KeyError, TypeError) as exc:
        print(f"Invalid draft: {exc}")
        raise SystemExit(1)

    config = default_config(draft.cell_type)
    if args.arrow_offset is not None:
        config = replace(config, arrow_offset=args.arrow_offset)
    board = draft.to_board(config)
    save_json(board, args.output_path)
    if args.render_path:
        from .render import render_png
        render_png(board, args.render_path)
    print(f"Saved {args.output_path}")


def _cmd_import(args) -> None:
    from .gltf import GltfFormatError, import_gltf

    try:
        result = import_gltf(args.input_path)
    except GltfFormatError as exc:
        print(exc)
        raise SystemExit(1)

    for failure in result.failures:
        print(f"mesh {failure.mesh} primitive {failure.primitive}: {failure.reason}")

    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    for index, board in enumerate(result.to_boards()):
        json_path = output_dir / f"board_{index}.json"
        save_json(board, json_path)
        if args.render:
            from .render import render_png
            render_png(board, output_dir / f"board_{index}.png")
        print(f"Saved {json_path} ({len(board.cells)} cells)")


if __name__ == "__main__":
    main()
