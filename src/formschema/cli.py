"""CLI entry point for FormSchema."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

from formschema import __version__, logger
from formschema.blocks import (
    BlockUpdate,
    assign_to_block,
    collect_blocks,
    create_block,
    dissolve_block,
    move_item,
    remove_from_block,
    unassigned_items,
    update_block,
)
from formschema.codec import (
    export_declaration,
    export_json,
    import_declaration,
    import_json,
    write_declaration,
    write_json,
)
from formschema.coordinates import format_coordinates, schema_records
from formschema.exceptions import PackageError
from formschema.generation import AttributeGenerationService
from formschema.logging import configure_logging
from formschema.sanitizer import apply_attributes
from formschema.settings import Settings, get_settings
from formschema.typing.enums import ColorTheme, CoordinateFormat, InputType
from formschema.typing.models import AttributeRequest, Schema

_DECLARATION_SUFFIX = ".ts"


def load_schema(path: Path) -> Schema:
    """Load a schema from a `.ts` declaration or a `.json` document.

    Args:
        path (Path): Schema file.

    Returns:
        Schema: Parsed schema.
    """
    text = path.read_text(encoding="utf-8")
    if path.suffix == _DECLARATION_SUFFIX:
        return import_declaration(text)
    return import_json(text)


def save_schema(schema: Schema, path: Path, *, form_type: str | None = None) -> None:
    """Write a schema in the format implied by the file suffix.

    Args:
        schema (Schema): Schema to write.
        path (Path): Target file.
        form_type (str | None): Declaration name; defaults to the file stem without `_schema`.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.suffix == _DECLARATION_SUFFIX:
        name = form_type or path.stem.removesuffix("_schema")
        path.write_text(export_declaration(schema, name), encoding="utf-8")
    else:
        path.write_text(export_json(schema), encoding="utf-8")
    logger.info("Schema saved", extra={"path": str(path), "items": len(schema)})


def _item_ids(value: str) -> list[str]:
    return [entry.strip() for entry in value.split(",") if entry.strip()]


def _add_block_parsers(subparsers: argparse._SubParsersAction) -> None:
    block_parser = subparsers.add_parser("block", help="Group schema items into blocks")
    block_parser.add_argument("--schema", required=True, type=Path, dest="schema_path")
    block_parser.add_argument("--output", type=Path, default=None, dest="output_path")
    actions = block_parser.add_subparsers(dest="action", required=True)

    create = actions.add_parser("create", help="Create a block from selected items")
    create.add_argument("--name", required=True)
    create.add_argument("--items", required=True, type=_item_ids)
    create.add_argument("--title", default=None)
    create.add_argument("--description", default=None)
    create.add_argument("--color", default=ColorTheme.BLUE, type=ColorTheme.from_str)

    assign = actions.add_parser("assign", help="Add items to an existing block")
    assign.add_argument("--name", required=True)
    assign.add_argument("--items", required=True, type=_item_ids)

    unassign = actions.add_parser("unassign", help="Remove one item from its block")
    unassign.add_argument("--item", required=True)

    dissolve = actions.add_parser("dissolve", help="Unassign every member of a block")
    dissolve.add_argument("--name", required=True)

    update = actions.add_parser("update", help="Rename or restyle a block")
    update.add_argument("--name", required=True)
    update.add_argument("--new-name", default=None, dest="new_name")
    update.add_argument("--title", default=None)
    update.add_argument("--description", default=None)
    update.add_argument("--color", default=None, type=ColorTheme.from_str)

    move = actions.add_parser("move", help="Move one item onto a block or 'unassigned'")
    move.add_argument("--item", required=True)
    move.add_argument("--target", required=True)


def build_parser() -> argparse.ArgumentParser:
    """Create the command-line parser.

    Returns:
        argparse.ArgumentParser: The configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="formschema")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command")

    export_parser = subparsers.add_parser("export", help="Export a schema as TypeScript and JSON files")
    export_parser.add_argument("--schema", required=True, type=Path, dest="schema_path")
    export_parser.add_argument("--form-type", required=True, dest="form_type")
    export_parser.add_argument("--output-dir", type=Path, default=None, dest="output_dir")
    export_parser.add_argument("--format", choices=("ts", "json", "both"), default="both", dest="export_format")

    import_parser = subparsers.add_parser("import", help="Parse an edited TypeScript schema into JSON")
    import_parser.add_argument("--input", required=True, type=Path, dest="input_path")
    import_parser.add_argument("--output", required=True, type=Path, dest="output_path")

    blocks_parser = subparsers.add_parser("blocks", help="List blocks and unassigned items")
    blocks_parser.add_argument("--schema", required=True, type=Path, dest="schema_path")

    _add_block_parsers(subparsers)

    coordinates_parser = subparsers.add_parser("coordinates", help="Print source field coordinates")
    coordinates_parser.add_argument("--schema", required=True, type=Path, dest="schema_path")
    coordinates_parser.add_argument(
        "--format",
        default=CoordinateFormat.SIMPLE,
        type=CoordinateFormat.from_str,
        dest="coordinate_format",
    )

    generate_parser = subparsers.add_parser("generate", help="Generate display attributes for one field")
    generate_parser.add_argument("--intent", required=True)
    generate_parser.add_argument("--field-type", required=True, type=InputType.from_str, dest="field_type")
    generate_parser.add_argument("--group-type", required=True, dest="group_type")
    generate_parser.add_argument("--field-name", action="append", default=[], dest="field_names")
    generate_parser.add_argument("--schema", type=Path, default=None, dest="schema_path")
    generate_parser.add_argument("--item", default=None, dest="item_id")

    return parser


def _run_export(args: argparse.Namespace, settings: Settings) -> None:
    schema = load_schema(args.schema_path)
    output_dir = args.output_dir or Path(settings.export_dir)
    if args.export_format in {"ts", "both"}:
        write_declaration(schema, args.form_type, output_dir)
    if args.export_format in {"json", "both"}:
        write_json(schema, args.form_type, output_dir)


def _run_import(args: argparse.Namespace) -> None:
    schema = import_declaration(args.input_path.read_text(encoding="utf-8"))
    save_schema(schema, args.output_path)


def _run_blocks(args: argparse.Namespace) -> None:
    schema = load_schema(args.schema_path)
    for block in collect_blocks(schema).values():
        counts = ", ".join(f"{kind}={count}" for kind, count in block.type_counts().items())
        sys.stdout.write(f"{block.name} ({block.title}): {len(block.items)} items [{counts}]\n")
        for item in block.items:
            sys.stdout.write(f"  - {item.unique_id}: {item.display_attributes.display_name}\n")
    unassigned = unassigned_items(schema)
    sys.stdout.write(f"Unassigned Items ({len(unassigned)})\n")
    for item in unassigned:
        sys.stdout.write(f"  - {item.unique_id}: {item.display_attributes.display_name}\n")


def apply_block_action(schema: Schema, args: argparse.Namespace) -> Schema:
    """Dispatch a `block` sub-command to the block engine.

    Args:
        schema (Schema): Current schema.
        args (argparse.Namespace): Parsed CLI args.

    Returns:
        Schema: New schema value.
    """
    if args.action == "create":
        return create_block(
            schema,
            args.items,
            args.name,
            title=args.title,
            description=args.description,
            color_theme=args.color,
        )
    if args.action == "assign":
        return assign_to_block(schema, args.items, args.name)
    if args.action == "unassign":
        return remove_from_block(schema, args.item)
    if args.action == "dissolve":
        return dissolve_block(schema, args.name)
    if args.action == "move":
        return move_item(schema, args.item, args.target)

    provided = {
        key: value
        for key, value in {
            "name": args.new_name,
            "title": args.title,
            "description": args.description,
            "color_theme": args.color,
        }.items()
        if value is not None
    }
    return update_block(schema, args.name, BlockUpdate(**provided))


def _run_block(args: argparse.Namespace) -> None:
    schema = load_schema(args.schema_path)
    updated = apply_block_action(schema, args)
    save_schema(updated, args.output_path or args.schema_path)


def _run_coordinates(args: argparse.Namespace) -> None:
    schema = load_schema(args.schema_path)
    sys.stdout.write(format_coordinates(schema_records(schema), args.coordinate_format) + "\n")


def _run_generate(args: argparse.Namespace, settings: Settings) -> None:
    request = AttributeRequest(
        intent=args.intent,
        field_type=args.field_type,
        group_type=args.group_type,
        pdf_context=args.field_names,
    )
    result = asyncio.run(AttributeGenerationService(settings).generate(request))
    sys.stdout.write(json.dumps(result.attributes, indent=2, ensure_ascii=False) + "\n")

    if args.schema_path and args.item_id:
        schema = apply_attributes(load_schema(args.schema_path), args.item_id, result.attributes)
        save_schema(schema, args.schema_path)


def main(argv: list[str] | None = None) -> int:
    """Run the CLI.

    Args:
        argv (list[str] | None): Arguments; defaults to `sys.argv[1:]`.

    Returns:
        int: Exit code (0 for success, 1 for error).
    """
    settings = get_settings()
    configure_logging(settings=settings)

    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        if args.command == "export":
            _run_export(args, settings)
        elif args.command == "import":
            _run_import(args)
        elif args.command == "blocks":
            _run_blocks(args)
        elif args.command == "block":
            _run_block(args)
        elif args.command == "coordinates":
            _run_coordinates(args)
        elif args.command == "generate":
            _run_generate(args, settings)
    except PackageError:
        logger.exception("Command failed", extra={"command": args.command})
        return 1
    except KeyboardInterrupt:
        logger.info("Command aborted by user")
        return 130
    except Exception:
        logger.exception("Unexpected error", extra={"command": args.command})
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
