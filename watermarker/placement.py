# watermarker/placement.py
import logging
from enum import StrEnum
from typing import Tuple

logger = logging.getLogger("placement")


class Position(StrEnum):
    CENTER = "center"
    TOP_LEFT = "top-left"
    TOP_RIGHT = "top-right"
    BOTTOM_LEFT = "bottom-left"
    BOTTOM_RIGHT = "bottom-right"

    @classmethod
    def from_name(cls, name) -> "Position":
        """
        Parse a position from config or command line.
        Accepts "top-left", "top_left", "TopLeft", "TOP_LEFT"...
        Unknown names fall back to center.
        """
        if isinstance(name, cls):
            return name
        raw = str(name or "").strip()
        key = raw.replace("_", "-").lower()
        if key in {p.value for p in cls}:
            return cls(key)
        # CamelCase: TopLeft -> top-left
        camel = "".join("-" + c.lower() if c.isupper() else c for c in raw).lstrip("-")
        if camel in {p.value for p in cls}:
            return cls(camel)
        logger.warning("Posición desconocida %r, se usa center", name)
        return cls.CENTER


def _half(value: int) -> int:
    # integer division truncating toward zero, not floor
    return int(value / 2)


def compute_offset(base_w: int, base_h: int, ow: int, oh: int,
                   position: Position, padding_x: int = 0, padding_y: int = 0) -> Tuple[int, int]:
    """
    Calcula la posición (x, y) donde colocar la marca de agua según config.
    No valida límites: puede quedar negativa o fuera de la imagen,
    el render recorta pixel por pixel.
    """
    if position == Position.TOP_LEFT:
        return (padding_x, padding_y)
    if position == Position.TOP_RIGHT:
        return (base_w - ow - padding_x, padding_y)
    if position == Position.BOTTOM_LEFT:
        return (padding_x, base_h - oh - padding_y)
    if position == Position.BOTTOM_RIGHT:
        return (base_w - ow - padding_x, base_h - oh - padding_y)
    # fallback → centro (sin margen)
    return (_half(base_w - ow), _half(base_h - oh))
