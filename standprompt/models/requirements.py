"""Form-priority requirement models.

:class:`FormPriorityRequirements` groups the fixed-wording sentences the
requirement extractor derives from a :class:`Specification`.  Empty lists
mean the corresponding prompt section is omitted.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class FormPriorityRequirements(BaseModel):
    model_config = ConfigDict(frozen=True)

    # "EXACTLY N ..." sentences for front-face, back-to-back and shelf counts.
    critical_numbers: list[str] = Field(default_factory=list)
    product_arrangement: list[str] = Field(default_factory=list)
    brand_requirements: list[str] = Field(default_factory=list)
    physical_constraints: list[str] = Field(default_factory=list)
    shelf_specification: list[str] = Field(default_factory=list)
    material_specification: list[str] = Field(default_factory=list)


class RequirementValidation(BaseModel):
    """Outcome of the regex fact-presence check on a candidate prompt."""

    model_config = ConfigDict(frozen=True)

    is_valid: bool
    # e.g. "Front face count: 3"
    missing_requirements: list[str] = Field(default_factory=list)
