from __future__ import annotations

import pytest

from saborlocal.analytics.store import clear_events
from saborlocal.cms.cache import clear_cache


@pytest.fixture(autouse=True)
def _reset_state():
    # Cache and analytics log are process-wide
    clear_cache()
    clear_events()
    yield
    clear_cache()
    clear_events()
