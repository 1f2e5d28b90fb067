from __future__ import annotations

from dataclasses import dataclass
import hashlib
from typing import Iterable

from luvatrix_map.style import Polyline


@dataclass(frozen=True)
class FrameSignature:
    zoom: float
    rotation: float
    content: str


def content_fingerprint(polylines: Iterable[Polyline]) -> str:
    """Digest over the ordered style and geometry fingerprints of every polyline."""
    h = hashlib.sha256()
    count = 0
    for polyline in polylines:
        h.update(polyline.style_fingerprint.encode("ascii"))
        h.update(polyline.geometry_fingerprint.encode("ascii"))
        count += 1
    h.update(str(count).encode("ascii"))
    return h.hexdigest()


def should_repaint(
    previous: FrameSignature | None,
    current: FrameSignature,
    *,
    layer_caching: bool = True,
) -> bool:
    if not layer_caching or previous is None:
        return True
    return (
        previous.zoom != current.zoom
        or previous.rotation != current.rotation
        or previous.content != current.content
    )
