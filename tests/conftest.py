import pytest

from smartplan.state import reset_all_sessions
from smartplan.utils import clear_debug_date, set_debug_date

# Wednesday
FROZEN_TODAY = "2025-06-11"


@pytest.fixture(autouse=True)
def frozen_today():
    set_debug_date(FROZEN_TODAY)
    yield FROZEN_TODAY
    clear_debug_date()


@pytest.fixture(autouse=True)
def clean_sessions():
    reset_all_sessions()
    yield
    reset_all_sessions()
