import os
import xml.etree.ElementTree as ET
from functools import lru_cache
from typing import Optional

from cartonizer_core.models import Box, Dims
from cartonizer_core.units import parse_float

from .cache import clear_box_cache
from .paths import boxes_xml_path


def _load_xml(path: str) -> ET.Element:
    if not os.path.exists(path):
        raise FileNotFoundError(f"Missing file: {path}")
    try:
        tree = ET.parse(path)
        return tree.getroot()
    except ET.ParseError as e:
        raise ValueError(f"Invalid XML in {path}: {e}")


def _optional_float(value: Optional[str]) -> Optional[float]:
    if value is None or not value.strip():
        return None
    return parse_float(value)


def _dims(element: ET.Element, prefix: str = "") -> Dims:
    values = []
    for axis in ("w", "d", "h"):
        value = element.get(prefix + axis)
        if value is None:
            raise ValueError(f"missing {prefix}{axis}")
        values.append(parse_float(value))
    return Dims(*values)


def _outer(element: ET.Element) -> Optional[Dims]:
    if not any(element.get(f"outer_{axis}") for axis in ("w", "d", "h")):
        return None
    return _dims(element, "outer_")


def _parse_box(element: ET.Element) -> Box:
    try:
        box_id = element.get("id", "").strip()
        if not box_id:
            raise ValueError("missing id")
        return Box(
            id=box_id,
            name=element.get("name", ""),
            inner=_dims(element),
            outer=_outer(element),
            max_weight_kg=_optional_float(element.get("max_weight")),
            box_weight_kg=_optional_float(element.get("weight")),
        )
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid box record '{element.attrib}': {e}")


@lru_cache(maxsize=None)
def load_boxes(path: Optional[str] = None) -> tuple:
    """Return the box catalog as a tuple of :class:`Box`."""
    root = _load_xml(path or boxes_xml_path())
    return tuple(_parse_box(element) for element in root.findall("box"))


def load_boxes_list(path: Optional[str] = None) -> list:
    """Load raw box records as dictionaries of strings."""
    root = _load_xml(path or boxes_xml_path())
    return [dict(element.attrib) for element in root.findall("box")]


def _text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, float):
        return f"{value:g}"
    return str(value)


def save_boxes(boxes, path: Optional[str] = None) -> None:
    """Write the box catalog back to XML and clear caches."""
    root = ET.Element("boxes")
    for box in boxes:
        attrs = {
            "id": box.id,
            "name": box.name,
            "w": _text(box.inner.w),
            "d": _text(box.inner.d),
            "h": _text(box.inner.h),
        }
        if box.outer is not None:
            attrs.update(
                outer_w=_text(box.outer.w),
                outer_d=_text(box.outer.d),
                outer_h=_text(box.outer.h),
            )
        if box.max_weight_kg is not None:
            attrs["max_weight"] = _text(box.max_weight_kg)
        if box.box_weight_kg is not None:
            attrs["weight"] = _text(box.box_weight_kg)
        ET.SubElement(root, "box", **attrs)
    tree = ET.ElementTree(root)
    tree.write(path or boxes_xml_path(), encoding="utf-8", xml_declaration=True)
    clear_box_cache()
