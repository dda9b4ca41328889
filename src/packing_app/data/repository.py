from .boxes_repo import load_boxes, load_boxes_list, save_boxes
from .cache import clear_box_cache
from .paths import boxes_xml_path, data_dir

__all__ = [
    "boxes_xml_path",
    "clear_box_cache",
    "data_dir",
    "load_boxes",
    "load_boxes_list",
    "save_boxes",
]
