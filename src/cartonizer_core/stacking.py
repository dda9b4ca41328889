from __future__ import annotations

import math
from typing import Optional

from .subspace import Slack

EPS = 1e-6


def compute_num_layers(
    available_height: float,
    layer_height: float,
    gap_z: float = 0.0,
    max_stack_layers: Optional[int] = None,
    slack: Optional[Slack] = None,
) -> int:
    """Vertical repetitions of a layer that fit into ``available_height``."""
    if layer_height <= 0 or available_height <= 0:
        return 0
    pitch = layer_height + gap_z
    layers = max(int((available_height + gap_z + EPS) // pitch), 0)
    if max_stack_layers is not None:
        layers = min(layers, max(max_stack_layers, 0))
    if slack is not None:
        slack.runs("h", available_height, layer_height, gap_z, layers)
    return layers


def compute_stack_height(num_layers: int, layer_height: float, gap_z: float = 0.0) -> float:
    """Height used by ``num_layers`` layers, without a trailing gap."""
    if num_layers <= 0 or layer_height <= 0:
        return 0.0
    return num_layers * layer_height + (num_layers - 1) * gap_z


def plan_stack(
    layer_capacity: int,
    available_height: float,
    layer_height: float,
    gap_z: float = 0.0,
    max_stack_layers: Optional[int] = None,
    needed: Optional[int] = None,
) -> int:
    """Number of layers to stack for one layer design.

    Without ``needed`` this is the full stack the box allows; otherwise the
    stack stops once ``needed`` units are covered.
    """
    if layer_capacity <= 0:
        return 0
    layers = compute_num_layers(available_height, layer_height, gap_z, max_stack_layers)
    if needed is not None:
        layers = min(layers, math.ceil(max(needed, 0) / layer_capacity))
    return layers
