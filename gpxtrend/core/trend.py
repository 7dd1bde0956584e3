"""
Trend Classifier.

Labels a segment UP / DOWN / CONSTANT from the sign and size of its net
change. The display metadata carried by TrendType (threshold, fill color,
alpha) is for legend and chart layers only; classification never reads it.
"""

from enum import Enum


DEFAULT_FILL_COLOR_ALPHA = int(0.3 * 255.0)


def _rgb(red: float, green: float, blue: float) -> int:
    """Pack [0, 1] float channels into an opaque 0xAARRGGBB int."""
    return (
        (0xFF << 24)
        | (int(red * 255.0 + 0.5) << 16)
        | (int(green * 255.0 + 0.5) << 8)
        | int(blue * 255.0 + 0.5)
    )


class TrendType(Enum):
    """Segment trend label with its presentation metadata."""
    UP = ("up", 20.0, _rgb(0.0, 0.96, 0.0), 255)
    CONSTANT = ("constant", 5.0, _rgb(0.96, 0.96, 0.96), DEFAULT_FILL_COLOR_ALPHA)
    DOWN = ("down", 20.0, _rgb(0.96, 0.0, 0.0), 255)

    def __init__(self, label: str, threshold: float, fill_color: int, fill_alpha: int):
        self.label = label
        self.threshold = threshold
        self.fill_color = fill_color
        self.fill_alpha = fill_alpha

    @classmethod
    def from_label(cls, label: str) -> "TrendType":
        for member in cls:
            if member.label == label.lower():
                return member
        raise ValueError(f"Unknown trend type: {label!r}")


def classify_delta(delta: float, min_significant_delta: float) -> TrendType:
    """
    Classify a signed net change.

    Args:
        delta: end_value - start_value
        min_significant_delta: Significance threshold

    Returns:
        UP if delta >= +threshold, DOWN if delta <= -threshold, else CONSTANT.
        A zero delta is CONSTANT even when the threshold is zero.
    """
    if delta > 0 and delta >= min_significant_delta:
        return TrendType.UP
    if delta < 0 and delta <= -min_significant_delta:
        return TrendType.DOWN
    return TrendType.CONSTANT


def classify(segment, thresholds) -> TrendType:
    """
    Classify a Segment against SegmentThresholds.

    Gap fillers are always CONSTANT.
    """
    if segment.filler:
        return TrendType.CONSTANT
    return classify_delta(segment.delta, thresholds.min_significant_delta)
