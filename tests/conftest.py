from __future__ import annotations

import pytest

from tests.helpers import ActivationCounter


@pytest.fixture
def counter() -> ActivationCounter:
    return ActivationCounter()
