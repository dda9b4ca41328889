def clear_box_cache() -> None:
    from .boxes_repo import load_boxes

    load_boxes.cache_clear()
