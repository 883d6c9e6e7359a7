"""Transforms between the rendering surface and image-pixel space."""

from __future__ import annotations

from PyQt6.QtCore import QPointF, QRectF


def _scale_factors(surface_rect: QRectF, image_width: float, image_height: float) -> tuple[float, float]:
    if surface_rect.width() <= 0 or surface_rect.height() <= 0:
        raise ValueError(
            f"Surface rectangle must have a positive size, got "
            f"{surface_rect.width()}x{surface_rect.height()}"
        )
    return (
        image_width / surface_rect.width(),
        image_height / surface_rect.height(),
    )


def to_image_space(
    surface_point: QPointF,
    surface_rect: QRectF,
    image_width: float,
    image_height: float
) -> QPointF:
    """
    Convert a point on the rendering surface to image-pixel coordinates.

    The X and Y scale factors are computed independently, so a surface
    displayed with a different aspect ratio than the image is handled.

    Args:
        surface_point: Interaction point in the surface's on-screen frame
        surface_rect: Displayed rectangle of the image on the surface
        image_width: Intrinsic image width in pixels
        image_height: Intrinsic image height in pixels

    Returns:
        The equivalent point in image-pixel space
    """
    scale_x, scale_y = _scale_factors(surface_rect, image_width, image_height)
    return QPointF(
        (surface_point.x() - surface_rect.left()) * scale_x,
        (surface_point.y() - surface_rect.top()) * scale_y,
    )


def to_surface_space(
    image_point: QPointF,
    surface_rect: QRectF,
    image_width: float,
    image_height: float
) -> QPointF:
    """Inverse of to_image_space."""
    scale_x, scale_y = _scale_factors(surface_rect, image_width, image_height)
    return QPointF(
        surface_rect.left() + image_point.x() / scale_x,
        surface_rect.top() + image_point.y() / scale_y,
    )


def rect_to_surface_space(
    image_rect: QRectF,
    surface_rect: QRectF,
    image_width: float,
    image_height: float
) -> QRectF:
    """Map an image-space rectangle onto the surface."""
    top_left = to_surface_space(image_rect.topLeft(), surface_rect, image_width, image_height)
    bottom_right = to_surface_space(
        image_rect.bottomRight(), surface_rect, image_width, image_height
    )
    return QRectF(top_left, bottom_right)
