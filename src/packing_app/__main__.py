import argparse
import logging
import sys
from importlib import metadata
from typing import List, Optional

import yaml

from cartonizer_core import InvalidInputError, OrderLineEntry, PackingStatus, pack_order, split_order
from cartonizer_core.quantity_plan import box_for_quantity, capacity_table
from cartonizer_core.settings import aggregate_entries, load_settings, resolve_item
from cartonizer_core.summary import describe_summary, overall_void_ratio
from cartonizer_core.units import format_ratio
from cartonizer_core.validation import validate_entries
from packing_app.data.repository import load_boxes

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_NOT_PACKED = 1
EXIT_INVALID = 2

ITEM_KEYS = ("id", "name", "w", "d", "h", "quantity")


def _get_app_version() -> str:
    try:
        return metadata.version("cartonizer")
    except metadata.PackageNotFoundError:
        return "dev"


def load_order(path: str, defaults) -> List[OrderLineEntry]:
    """Read order lines from YAML: ``items: [{id, w, d, h, quantity, ...}]``."""
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict) or not isinstance(data.get("items"), list):
        raise InvalidInputError(f"{path}: expected a mapping with an 'items' list")
    entries = []
    for index, raw in enumerate(data["items"]):
        if not isinstance(raw, dict):
            raise InvalidInputError(f"{path}: item {index} is not a mapping")
        missing = [key for key in ("id", "w", "d", "h", "quantity") if key not in raw]
        if missing:
            raise InvalidInputError(f"{path}: item {index} lacks {', '.join(missing)}")
        overrides = {key: value for key, value in raw.items() if key not in ITEM_KEYS}
        item = resolve_item(
            str(raw["id"]),
            (raw["w"], raw["d"], raw["h"]),
            name=str(raw.get("name", "")),
            overrides=overrides,
            defaults=defaults,
        )
        entries.append(OrderLineEntry(item, raw["quantity"]))
    errors = validate_entries(entries)
    if errors:
        raise InvalidInputError("; ".join(errors))
    return aggregate_entries(entries)


def describe_capacity(entries, boxes, constants) -> List[str]:
    """Per item: how many units each box holds, and the box for its quantity."""
    lines = []
    for entry in entries:
        lines.append(f"{entry.item.id}:")
        for row in capacity_table(entry.item, boxes, constants):
            if row.orientation is None:
                lines.append(f"  {row.box_id}: does not fit")
                continue
            a, b, c = row.orientation
            lines.append(
                f"  {row.box_id}: {row.capacity} units, {row.layers} layers of "
                f"{row.layer_capacity} ({a:g}x{b:g}x{c:g}), void {format_ratio(row.void_ratio)}"
            )
        box_id = box_for_quantity(entry.item, boxes, entry.quantity, constants)
        lines.append(f"  box for {entry.quantity}: {box_id or '-'}")
    return lines


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cartonizer", description="Choose shipping boxes for an order."
    )
    parser.add_argument("order", help="order YAML file")
    parser.add_argument("--boxes", help="box catalog XML (defaults to the packaged one)")
    parser.add_argument("--settings", help="settings YAML with packing defaults")
    parser.add_argument("--box", dest="box_id", help="evaluate this box instead of AUTO")
    parser.add_argument("--split", action="store_true", help="open more boxes for the leftover")
    parser.add_argument("--max-boxes", type=int, default=50)
    parser.add_argument(
        "--capacity", action="store_true", help="print per-box capacities instead of packing"
    )
    parser.add_argument("--plot", help="save the first box's layer plan to this image")
    parser.add_argument("-v", "--verbose", action="store_true")
    parser.add_argument("--version", action="version", version=_get_app_version())
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    defaults = load_settings(args.settings)
    constants = defaults.constants()
    try:
        boxes = list(load_boxes(args.boxes))
        entries = load_order(args.order, defaults)
        if args.capacity:
            for line in describe_capacity(entries, boxes, constants):
                print(line)
            return EXIT_OK
        if args.split:
            summary = split_order(entries, boxes, constants, max_boxes=args.max_boxes)
        else:
            summary = pack_order(entries, boxes, args.box_id, constants)
    except (InvalidInputError, FileNotFoundError, ValueError, yaml.YAMLError) as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_INVALID

    for line in describe_summary(summary):
        print(line)
    if len(summary.selections) > 1:
        print(f"overall void: {format_ratio(overall_void_ratio(summary.selections, boxes))}")

    if args.plot and summary.selections:
        from packing_app.render import plot_selection

        selection = summary.selections[0]
        box = next(box for box in boxes if box.id == selection.box_id)
        try:
            plot_selection(
                selection, entries, box, box_padding=constants.box_padding, output=args.plot
            )
        except OSError:
            logger.exception("Failed to save layer plan to %s", args.plot)

    return EXIT_OK if summary.status == PackingStatus.SUCCESS else EXIT_NOT_PACKED


if __name__ == "__main__":
    sys.exit(main())
