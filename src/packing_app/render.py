from __future__ import annotations

from typing import Optional, Sequence

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402

from cartonizer_core.models import Box, OrderLineEntry, PackingSelection  # noqa: E402
from cartonizer_core.placement import packed_positions  # noqa: E402

ENTRY_COLORS = ["#00bcd4", "#ff9800", "#4caf50", "#e91e63", "#9c27b0", "#3f51b5"]


def entry_color(entry_index: int) -> str:
    return ENTRY_COLORS[entry_index % len(ENTRY_COLORS)]


def draw_layer(
    ax,
    selection: PackingSelection,
    entries: Sequence[OrderLineEntry],
    box: Box,
    layer_index: int,
    *,
    box_padding: float = 0.0,
    show_numbers: bool = False,
) -> int:
    """Draw one layer of ``selection`` in plan view; return the units drawn."""
    ax.clear()
    ax.add_patch(
        plt.Rectangle(
            (0, 0),
            box.inner.w,
            box.inner.d,
            fill=False,
            edgecolor="black",
            linewidth=2,
        )
    )
    layer = selection.layers[layer_index]
    start = sum(previous.placed for previous in selection.layers[:layer_index])
    units = packed_positions(selection, entries, box, box_padding)[start:start + layer.placed]
    for number, unit in enumerate(units, start=1):
        ax.add_patch(
            plt.Rectangle(
                (unit.x, unit.y),
                unit.w,
                unit.d,
                fill=True,
                facecolor=entry_color(unit.entry_index),
                alpha=0.6,
                edgecolor="black",
            )
        )
        if show_numbers:
            ax.text(
                unit.x + unit.w / 2,
                unit.y + unit.d / 2,
                str(number),
                ha="center",
                va="center",
                fontsize=8,
                color="black",
                zorder=10,
            )
    ax.set_xlim(0, box.inner.w)
    ax.set_ylim(0, box.inner.d)
    ax.set_aspect("equal")
    ax.set_title(f"Layer {layer_index + 1} ({layer.type.value}): {len(units)}", fontsize=10)
    return len(units)


def plot_selection(
    selection: PackingSelection,
    entries: Sequence[OrderLineEntry],
    box: Box,
    *,
    box_padding: float = 0.0,
    max_layers: int = 6,
    output: Optional[str] = None,
):
    """Plan view of the distinct layers of a selection, side by side."""
    shown = []
    seen = set()
    for index, layer in enumerate(selection.layers):
        key = tuple((c.entry_index, c.orientation, c.count, c.rows, c.placed) for c in layer.columns)
        if key in seen:
            continue
        seen.add(key)
        shown.append(index)
        if len(shown) >= max_layers:
            break
    columns = max(len(shown), 1)
    fig = plt.Figure(figsize=(4 * columns, 4))
    axes = [fig.add_subplot(1, columns, position + 1) for position in range(columns)]
    for ax, index in zip(axes, shown):
        draw_layer(ax, selection, entries, box, index, box_padding=box_padding)
    fig.suptitle(
        f"{selection.box_id}: {selection.packed_total} units, void {selection.void_ratio_display}"
    )
    if output:
        fig.savefig(output)
    return fig
