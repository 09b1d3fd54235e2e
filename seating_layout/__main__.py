from __future__ import annotations

import argparse
from typing import Optional

from .canvas import GeometryError
from .editor import BlockEditor
from .grid import materialize_template
from .logger_config import configure_logging
from .model import BlockType, LayoutError, find_block, validate_layout
from .render import render_layout, render_text
from .storage import load_map, load_template, load_tiers, maybe_init_map, save_map
from .summary import capacity_summary, status_counts, total_capacity
from .tiers import AssignmentResult, TierAssignmentEngine, tool_from_selection


DEFAULT_FILE = "seating_map.json"


def _add_common_args(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--file",
        default=DEFAULT_FILE,
        help=f"Path to seating map JSON file (default: {DEFAULT_FILE})",
    )


def _add_tool_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--tool", help="Tier id to assign, RESERVED for reserve mode; omit to clear")
    p.add_argument("--tiers", help="Path to a JSON list of tiers {id, name, price, color}")


def _editor(args: argparse.Namespace) -> BlockEditor:
    editor = BlockEditor.from_request(load_map(args.file))
    if getattr(args, "zoom", None) is not None:
        editor.set_zoom(args.zoom)
    return editor


def _save(editor: BlockEditor, args: argparse.Namespace) -> None:
    save_map(editor.to_request(), args.file)


def _require_block(editor: BlockEditor, block_id: str) -> bool:
    if find_block(editor.layout, block_id) is None:
        print(f"Block not found: {block_id}")
        return False
    return True


def cmd_init(args: argparse.Namespace) -> int:
    maybe_init_map(args.file, name=args.name, overwrite=args.overwrite)
    print(f"Initialized seating map at {args.file}")
    return 0


def cmd_add_block(args: argparse.Namespace) -> int:
    editor = _editor(args)
    block = editor.add_block(BlockType(args.type))
    if args.name:
        editor.rename_block(block.id, args.name)
    _save(editor, args)
    print(block.id)
    return 0


def cmd_remove_block(args: argparse.Namespace) -> int:
    editor = _editor(args)
    if not _require_block(editor, args.block):
        return 1
    editor.remove_block(args.block)
    _save(editor, args)
    print(f"Removed block {args.block}")
    return 0


def cmd_move(args: argparse.Namespace) -> int:
    editor = _editor(args)
    if not _require_block(editor, args.block):
        return 1
    editor.move_block(args.block, args.dx, args.dy)
    _save(editor, args)
    pos = find_block(editor.layout, args.block).position
    print(f"Moved {args.block} to ({pos.x:g}, {pos.y:g})")
    return 0


def cmd_resize(args: argparse.Namespace) -> int:
    editor = _editor(args)
    if not _require_block(editor, args.block):
        return 1
    editor.resize_block(args.block, args.dw, args.dh)
    _save(editor, args)
    block = find_block(editor.layout, args.block)
    if not block.is_resizable:
        print(f"Block {args.block} is sized by its seat grid; unchanged")
    else:
        print(f"Resized {args.block} to {block.width:g}x{block.height:g}")
    return 0


def cmd_grid(args: argparse.Namespace) -> int:
    editor = _editor(args)
    if not _require_block(editor, args.block):
        return 1
    editor.configure_grid(
        args.block,
        args.rows,
        args.cols,
        start_row_label=args.start_row,
        start_column=args.start_col,
    )
    _save(editor, args)
    print(f"Regenerated {args.block} as {args.rows} rows x {args.cols} cols")
    return 0


def cmd_capacity(args: argparse.Namespace) -> int:
    editor = _editor(args)
    if not _require_block(editor, args.block):
        return 1
    editor.set_capacity(args.block, args.capacity)
    _save(editor, args)
    print(f"Set capacity of {args.block} to {args.capacity}")
    return 0


def cmd_rename(args: argparse.Namespace) -> int:
    editor = _editor(args)
    if not _require_block(editor, args.block):
        return 1
    editor.rename_block(args.block, args.name)
    _save(editor, args)
    print(f"Renamed {args.block} to {args.name!r}")
    return 0


def cmd_set_type(args: argparse.Namespace) -> int:
    editor = _editor(args)
    if not _require_block(editor, args.block):
        return 1
    editor.change_type(args.block, BlockType(args.type))
    _save(editor, args)
    print(f"Changed {args.block} to {args.type}")
    return 0


def _engine(args: argparse.Namespace) -> tuple[BlockEditor, TierAssignmentEngine]:
    editor = _editor(args)
    engine = TierAssignmentEngine(layout=editor.layout, tiers=load_tiers(args.tiers))
    engine.select_tier(args.tool)
    return editor, engine


def _finish_assignment(editor: BlockEditor, engine: TierAssignmentEngine, result: AssignmentResult, args) -> int:
    if result.rejected:
        print(f"Warning: {result.warning}")
        return 1
    if not result.applied:
        print("Nothing to assign")
        return 1
    editor.layout = engine.layout
    _save(editor, args)
    return 0


def cmd_assign_seat(args: argparse.Namespace) -> int:
    editor, engine = _engine(args)
    result = engine.seat_click(args.block, args.row, args.seat)
    code = _finish_assignment(editor, engine, result, args)
    if code == 0:
        print(f"Updated seat {args.seat}")
    return code


def cmd_assign_block(args: argparse.Namespace) -> int:
    editor, engine = _engine(args)
    result = engine.block_click(args.block)
    code = _finish_assignment(editor, engine, result, args)
    if code == 0:
        print(f"Updated standing block {args.block}")
    return code


def cmd_apply_all(args: argparse.Namespace) -> int:
    editor, engine = _engine(args)
    result = engine.apply_to_all(args.block)
    code = _finish_assignment(editor, engine, result, args)
    if code == 0:
        print(f"Applied {result.tier_name} to {result.affected} seats in {args.block}")
    return code


def cmd_show(args: argparse.Namespace) -> int:
    seating_map = load_map(args.file)
    view = render_layout(seating_map.layout, load_tiers(args.tiers), name=seating_map.name)
    print(render_text(view, cell_width=args.width))
    return 0


def cmd_summary(args: argparse.Namespace) -> int:
    layout = load_map(args.file).layout
    print(f"Total capacity: {total_capacity(layout)}")
    for tally in capacity_summary(layout, load_tiers(args.tiers)):
        noun = "seat" if tally.count == 1 else "seats"
        print(f"  {tally.name}: {tally.count} {noun}")
    for status, count in status_counts(layout).items():
        print(f"  {status}: {count}")
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    problems = validate_layout(load_map(args.file).layout)
    for p in problems:
        print(p)
    if problems:
        return 1
    print("OK")
    return 0


def cmd_materialize(args: argparse.Namespace) -> int:
    seating_map = materialize_template(load_template(args.template))
    save_map(seating_map, args.file)
    print(f"Materialized {args.template} into {args.file}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="seating_layout", description="Venue seating layout editor (CLI).")
    sub = p.add_subparsers(dest="cmd", required=True)
    block_types = [t.value for t in BlockType]

    p_init = sub.add_parser("init", help="Create a new, empty seating map JSON file")
    _add_common_args(p_init)
    p_init.add_argument("--name", help="Layout name")
    p_init.add_argument("--overwrite", action="store_true", help="Overwrite existing map file")
    p_init.set_defaults(func=cmd_init)

    p_add = sub.add_parser("add-block", help="Append a block with type defaults; prints its id")
    _add_common_args(p_add)
    p_add.add_argument("--type", choices=block_types, required=True)
    p_add.add_argument("--name")
    p_add.set_defaults(func=cmd_add_block)

    p_remove = sub.add_parser("remove-block", help="Delete a block")
    _add_common_args(p_remove)
    p_remove.add_argument("--block", required=True)
    p_remove.set_defaults(func=cmd_remove_block)

    p_move = sub.add_parser("move", help="Drag a block by a screen-pixel delta")
    _add_common_args(p_move)
    p_move.add_argument("--block", required=True)
    p_move.add_argument("--dx", type=float, default=0.0)
    p_move.add_argument("--dy", type=float, default=0.0)
    p_move.add_argument("--zoom", type=float, help="Canvas zoom the delta was measured at")
    p_move.set_defaults(func=cmd_move)

    p_resize = sub.add_parser("resize", help="Resize a standing or non-sellable block by a screen-pixel delta")
    _add_common_args(p_resize)
    p_resize.add_argument("--block", required=True)
    p_resize.add_argument("--dw", type=float, default=0.0)
    p_resize.add_argument("--dh", type=float, default=0.0)
    p_resize.add_argument("--zoom", type=float)
    p_resize.set_defaults(func=cmd_resize)

    p_grid = sub.add_parser("grid", help="Regenerate a seated grid (discards seat tiers)")
    _add_common_args(p_grid)
    p_grid.add_argument("--block", required=True)
    p_grid.add_argument("--rows", type=int, required=True)
    p_grid.add_argument("--cols", type=int, required=True)
    p_grid.add_argument("--start-row", default=None, help="First row label (default: A)")
    p_grid.add_argument("--start-col", type=int, default=None, help="First seat number (default: 1)")
    p_grid.set_defaults(func=cmd_grid)

    p_cap = sub.add_parser("capacity", help="Set a standing block's capacity")
    _add_common_args(p_cap)
    p_cap.add_argument("--block", required=True)
    p_cap.add_argument("--capacity", type=int, required=True)
    p_cap.set_defaults(func=cmd_capacity)

    p_rename = sub.add_parser("rename", help="Rename a block")
    _add_common_args(p_rename)
    p_rename.add_argument("--block", required=True)
    p_rename.add_argument("--name", required=True)
    p_rename.set_defaults(func=cmd_rename)

    p_type = sub.add_parser("set-type", help="Change a block's type (resets type-specific settings)")
    _add_common_args(p_type)
    p_type.add_argument("--block", required=True)
    p_type.add_argument("--type", choices=block_types, required=True)
    p_type.set_defaults(func=cmd_set_type)

    p_seat = sub.add_parser("assign-seat", help="Click a seat with the selected tool")
    _add_common_args(p_seat)
    _add_tool_args(p_seat)
    p_seat.add_argument("--block", required=True)
    p_seat.add_argument("--row")
    p_seat.add_argument("--seat", required=True)
    p_seat.set_defaults(func=cmd_assign_seat)

    p_blk = sub.add_parser("assign-block", help="Click a standing block with the selected tool")
    _add_common_args(p_blk)
    _add_tool_args(p_blk)
    p_blk.add_argument("--block", required=True)
    p_blk.set_defaults(func=cmd_assign_block)

    p_all = sub.add_parser("apply-all", help="Apply the selected tool to every seat of a seated block")
    _add_common_args(p_all)
    _add_tool_args(p_all)
    p_all.add_argument("--block", required=True)
    p_all.set_defaults(func=cmd_apply_all)

    p_show = sub.add_parser("show", help="Print the layout")
    _add_common_args(p_show)
    p_show.add_argument("--tiers")
    p_show.add_argument("--width", type=int, default=3, help="Cell width for display")
    p_show.set_defaults(func=cmd_show)

    p_sum = sub.add_parser("summary", help="Print capacity per tier and per status")
    _add_common_args(p_sum)
    p_sum.add_argument("--tiers")
    p_sum.set_defaults(func=cmd_summary)

    p_val = sub.add_parser("validate", help="Check structural invariants")
    _add_common_args(p_val)
    p_val.set_defaults(func=cmd_validate)

    p_mat = sub.add_parser("materialize", help="Build a seating map from a structural layout template")
    _add_common_args(p_mat)
    p_mat.add_argument("--template", required=True)
    p_mat.set_defaults(func=cmd_materialize)

    return p


def main(argv: Optional[list[str]] = None) -> int:
    configure_logging()
    p = build_parser()
    args = p.parse_args(argv)
    try:
        return int(args.func(args))
    except (LayoutError, GeometryError) as e:
        print(f"Error: {e}")
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
