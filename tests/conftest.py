"""Shared pytest fixtures for the standprompt test suite."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

import pytest

from standprompt.interfaces.visual_context_provider import IVisualContextProvider
from standprompt.models.hierarchy import (
    CapturedViews,
    ScaleAccuracy,
    VisualContextRequest,
    VisualContextResult,
)
from standprompt.models.specification import Specification
from standprompt.utils.errors import VisualContextError

# ---------------------------------------------------------------------------
# Specifications
# ---------------------------------------------------------------------------


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def scenario_a_spec() -> Specification:
    """Small single-shelf stand: one row of twelve slim products."""
    return Specification(
        brand="Solara",
        product="Sun Stick SPF50",
        product_width=13,
        product_depth=2.5,
        product_height=5,
        front_face_count=1,
        back_to_back_count=12,
        shelf_width=15,
        shelf_depth=15,
        shelf_count=1,
        stand_width=15,
        stand_depth=30,
        stand_height=30,
    )


@pytest.fixture
def full_spec() -> Specification:
    """Four-shelf floor stand with every form field filled in."""
    return Specification(
        brand="Nordic Bites",
        product="Oat Crisp Bars",
        description="Crunchy oat bars in recyclable wrappers",
        product_width=8,
        product_depth=4,
        product_height=20,
        front_face_count=3,
        back_to_back_count=4,
        shelf_width=40,
        shelf_depth=30,
        shelf_count=4,
        stand_width=45,
        stand_depth=35,
        stand_height=160,
        stand_base_color="White",
        stand_type="Floor stand",
        materials=["Cardboard", "Printed laminate"],
    )


@pytest.fixture
def empty_spec() -> Specification:
    return Specification()


@pytest.fixture
def base_prompt() -> str:
    return (
        "Photorealistic retail display stand in a bright supermarket aisle, "
        "clean studio lighting, Scandinavian style with natural tones."
    )


@pytest.fixture
def captured_views() -> CapturedViews:
    return CapturedViews(
        front="data:image/png;base64,AAAA",
        side="data:image/png;base64,BBBB",
        three_quarter="data:image/png;base64,CCCC",
    )


@pytest.fixture
def spec_mapping() -> dict[str, Any]:
    """Plain mapping form of a specification, as read from a YAML file."""
    return {
        "brand": "Nordic Bites",
        "product": "Oat Crisp Bars",
        "front_face_count": 3,
        "back_to_back_count": 4,
        "shelf_count": 4,
        "shelf_width": 40,
        "shelf_depth": 30,
        "product_width": 8,
        "product_depth": 4,
        "product_height": 20,
        "stand_width": 45,
        "stand_depth": 35,
        "stand_height": 160,
        "materials": ["Cardboard"],
    }


# ---------------------------------------------------------------------------
# Fake visual-context providers
# ---------------------------------------------------------------------------


class FakeVisualContextProvider(IVisualContextProvider):
    """Returns a canned result and records every request."""

    def __init__(
        self,
        confidence: float = 0.95,
        product_scale: bool | dict = True,
        images: int = 3,
    ) -> None:
        self._result = VisualContextResult(
            reference_images=[f"https://cdn.example.com/ref-{i}.png" for i in range(images)],
            scale_accuracy=ScaleAccuracy(
                overall_confidence=confidence,
                product_scale=product_scale,
            ),
        )
        self.requests: list[VisualContextRequest] = []

    async def generate_visual_context(
        self, request: VisualContextRequest
    ) -> VisualContextResult:
        self.requests.append(request)
        return self._result

    def get_provider_name(self) -> str:
        return "fake-visual"


class FailingVisualContextProvider(IVisualContextProvider):
    async def generate_visual_context(
        self, request: VisualContextRequest
    ) -> VisualContextResult:
        raise VisualContextError("Scene capture unavailable", provider_name="fake-visual")

    def get_provider_name(self) -> str:
        return "failing-visual"


class SlowVisualContextProvider(IVisualContextProvider):
    def __init__(self, delay: float = 1.0) -> None:
        self._delay = delay

    async def generate_visual_context(
        self, request: VisualContextRequest
    ) -> VisualContextResult:
        await asyncio.sleep(self._delay)
        return VisualContextResult(
            reference_images=[],
            scale_accuracy=ScaleAccuracy(overall_confidence=1.0, product_scale=True),
        )

    def get_provider_name(self) -> str:
        return "slow-visual"


@pytest.fixture
def visual_provider() -> FakeVisualContextProvider:
    return FakeVisualContextProvider()


@pytest.fixture
def low_confidence_provider() -> FakeVisualContextProvider:
    return FakeVisualContextProvider(confidence=0.6, product_scale=False, images=1)


@pytest.fixture
def failing_provider() -> FailingVisualContextProvider:
    return FailingVisualContextProvider()


@pytest.fixture
def slow_provider() -> SlowVisualContextProvider:
    return SlowVisualContextProvider(delay=1.0)
