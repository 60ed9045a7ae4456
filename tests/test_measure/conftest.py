"""Shared fixtures for measurement module tests."""

from __future__ import annotations

from datetime import date

import numpy as np
import pytest

from pixiquant.core.models import ImageBuffer


@pytest.fixture
def processing_date() -> date:
    return date(2026, 10, 19)


@pytest.fixture
def stack(scene: np.ndarray) -> ImageBuffer:
    """A 3-frame stack whose first frame is the synthetic scene."""
    rng = np.random.default_rng(1)
    frames = [scene, rng.random(scene.shape), np.full(scene.shape, 0.6)]
    return ImageBuffer(np.stack(frames))
