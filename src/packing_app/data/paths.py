import os

DATA_DIR = os.path.join(os.path.dirname(__file__))


def data_dir() -> str:
    return DATA_DIR


def boxes_xml_path() -> str:
    return os.getenv("CARTONIZER_BOXES") or os.path.join(DATA_DIR, "boxes.xml")
