"""
Fit geometry - Maps a source size and a target box to resize/crop operations.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from .conversion_spec import CONTAIN, CROP, FILL, MAX
from .errors import ConversionFailure

Size = Tuple[int, int]


@dataclass(frozen=True)
class Geometry:
    """
    Operations for one derivative.

    Attributes:
        resize: Size to resample the source to
        crop: Optional (left, top, right, bottom) box applied after resizing
    """
    resize: Size
    crop: Optional[Tuple[int, int, int, int]] = None

    @property
    def output_size(self) -> Size:
        if self.crop:
            left, top, right, bottom = self.crop
            return right - left, bottom - top
        return self.resize


def resolve_box(source: Size, width: Optional[int], height: Optional[int]) -> Size:
    """
    Complete a partially specified box from the source aspect ratio.

    A missing dimension is derived proportionally; with neither given the
    box is the source size.
    """
    src_w, src_h = source
    if width is None and height is None:
        return src_w, src_h
    if width is None:
        return max(1, round(src_w * height / src_h)), height
    if height is None:
        return width, max(1, round(src_h * width / src_w))
    return width, height


def compute_geometry(fit: str, source: Size, width: Optional[int], height: Optional[int]) -> Geometry:
    """
    Compute resize/crop for a fit method.

    - crop: cover the box, then crop the overflow centered (output == box)
    - contain: scale to fit inside the box (output <= box)
    - max: like contain, but never enlarges
    - fill: stretch to the box, ignoring aspect ratio

    Raises:
        ConversionFailure: For an unknown fit or an empty source
    """
    src_w, src_h = source
    if src_w <= 0 or src_h <= 0:
        raise ConversionFailure(f"Invalid source size {src_w}x{src_h}")

    box_w, box_h = resolve_box(source, width, height)

    if fit == CROP:
        scale = max(box_w / src_w, box_h / src_h)
        resized = (max(box_w, round(src_w * scale)), max(box_h, round(src_h * scale)))
        left = (resized[0] - box_w) // 2
        top = (resized[1] - box_h) // 2
        return Geometry(resize=resized, crop=(left, top, left + box_w, top + box_h))

    if fit in (CONTAIN, MAX):
        scale = min(box_w / src_w, box_h / src_h)
        if fit == MAX:
            scale = min(scale, 1.0)
        resized = (
            max(1, min(box_w, round(src_w * scale))),
            max(1, min(box_h, round(src_h * scale))),
        )
        return Geometry(resize=resized)

    if fit == FILL:
        return Geometry(resize=(box_w, box_h))

    raise ConversionFailure(f"Unknown fit method: {fit}")
