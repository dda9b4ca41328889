import math

MM = float
KG = float

MM3_PER_M3 = 1_000_000_000


def parse_float(value: str) -> float:
    text = value.strip()
    if not text:
        raise ValueError("empty input")
    text = text.replace(",", ".")
    return float(text)


def format_float(value: float, ndigits: int = 2) -> str:
    return f"{value:.{ndigits}f}"


def format_ratio(ratio: float) -> str:
    """Render a ratio as a percentage with one decimal, e.g. ``0.237 -> 23.7%``."""
    return f"{math.floor(ratio * 1000 + 0.5) / 10:.1f}%"


def mm3_to_m3(volume: float) -> float:
    return volume / MM3_PER_M3


def is_finite_number(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)
