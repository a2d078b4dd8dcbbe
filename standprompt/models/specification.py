"""Stand specification models.

The :class:`Specification` is the Tier-1 "absolute truth" of a pipeline
run: everything the user typed into the stand designer form.  It is
frozen once received, and every downstream component reads it without
modifying it.

All lengths are centimetres.  Every field is optional; a missing, zero or
negative value means "not specified" and simply suppresses the analysis
or prompt sentence that would depend on it.  Non-positive measurements
are stored as ``None`` so no caller ever sees them.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Box(BaseModel):
    """A width x depth x height envelope with strictly positive sides."""

    model_config = ConfigDict(frozen=True)

    width: float = Field(gt=0)
    depth: float = Field(gt=0)
    height: float = Field(gt=0)

    @property
    def volume(self) -> float:
        return self.width * self.depth * self.height


class ShelfSpec(BaseModel):
    """Shelf footprint plus the number of shelf levels."""

    model_config = ConfigDict(frozen=True)

    width: float = Field(gt=0)
    depth: float = Field(gt=0)
    count: int = Field(gt=0)


def _positive(value: float | None) -> bool:
    return value is not None and value > 0


def _box(width: float | None, depth: float | None, height: float | None) -> Box | None:
    if not (_positive(width) and _positive(depth) and _positive(height)):
        return None
    return Box(width=width, depth=depth, height=height)


class Specification(BaseModel):
    """Caller-supplied facts about the product and the display stand."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    # -- Brand identity (embedded verbatim into the prompt) --
    brand: str = ""
    product: str = ""
    description: str = ""

    # -- Product envelope --
    product_width: float | None = None
    product_depth: float | None = None
    product_height: float | None = None

    # -- Arrangement counts (the numbers that must survive compression) --
    # Products facing the shopper across each shelf.
    front_face_count: int | None = None
    # Products stacked front-to-back behind each front-facing product.
    back_to_back_count: int | None = None

    # -- Shelves --
    shelf_width: float | None = None
    shelf_depth: float | None = None
    shelf_count: int | None = None

    # -- Stand envelope and finish --
    stand_width: float | None = None
    stand_depth: float | None = None
    stand_height: float | None = None
    stand_base_color: str = ""
    stand_type: str = ""
    materials: list[str] = Field(default_factory=list)

    @field_validator(
        "product_width",
        "product_depth",
        "product_height",
        "front_face_count",
        "back_to_back_count",
        "shelf_width",
        "shelf_depth",
        "shelf_count",
        "stand_width",
        "stand_depth",
        "stand_height",
    )
    @classmethod
    def _non_positive_is_absent(cls, value: float | None) -> float | None:
        return value if _positive(value) else None

    def product_box(self) -> Box | None:
        """Product envelope, or None if any side is missing or not positive."""
        return _box(self.product_width, self.product_depth, self.product_height)

    def stand_box(self) -> Box | None:
        """Stand envelope, or None if any side is missing or not positive."""
        return _box(self.stand_width, self.stand_depth, self.stand_height)

    def shelf_spec(self) -> ShelfSpec | None:
        """Shelf footprint and count, or None if any part is missing or not positive."""
        if not (
            _positive(self.shelf_width)
            and _positive(self.shelf_depth)
            and _positive(self.shelf_count)
        ):
            return None
        return ShelfSpec(width=self.shelf_width, depth=self.shelf_depth, count=self.shelf_count)

    def has_tier1_facts(self) -> bool:
        """True when at least one field would produce a form-priority sentence."""
        return bool(
            self.brand
            or self.product
            or self.front_face_count
            or self.back_to_back_count
            or self.shelf_count
            or self.product_box()
            or self.stand_box()
            or self.shelf_width
            or self.materials
        )
