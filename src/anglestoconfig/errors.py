from __future__ import annotations


class AnglesToConfigError(ValueError):
    pass


class InsufficientDataError(AnglesToConfigError):
    """Too few (or collinear) samples to fit a screen plane."""


class DegenerateScreenError(AnglesToConfigError):
    """Fitted or supplied screen has non-positive width or height."""


class ProjectionError(AnglesToConfigError):
    """
    A ray from the eye is parallel to the screen plane.

    `index` is the offending mapping index when raised while building a mesh.
    """

    def __init__(self, msg: str, index: int | None = None) -> None:
        super().__init__(msg)
        self.index = index
