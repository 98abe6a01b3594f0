from __future__ import annotations

import sys
from contextlib import ExitStack
from pathlib import Path
from typing import Iterable

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from fastapi.testclient import TestClient

API_CUSTOM_TIMES = '[[-4, "api_dawn", "api_dusk"]]'


@pytest.fixture(scope="session")
def api_client() -> Iterable[TestClient]:
    from sunmoon_api import app

    with ExitStack() as stack:
        # The variable is only needed while the lifespan loads custom times.
        with pytest.MonkeyPatch.context() as patch:
            patch.setenv("SUNMOON_CUSTOM_TIMES", API_CUSTOM_TIMES)
            client = stack.enter_context(TestClient(app))
        yield client
