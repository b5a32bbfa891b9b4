from collections.abc import Callable
from pathlib import Path

import pendulum
import pytest
from pendulum import DateTime


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        if Path(item.path).is_relative_to(Path(__file__).parent):
            item.add_marker(pytest.mark.unit)


FreezeTimeFunc = Callable[..., DateTime]


@pytest.fixture
def freeze_time(monkeypatch: pytest.MonkeyPatch) -> FreezeTimeFunc:
    """Return a function to freeze pendulum.now() to a fixed time."""
    real_now = pendulum.now

    def _freeze(
        year: int,
        month: int,
        day: int,
        hour: int = 0,
        minute: int = 0,
        second: int = 0,
        microsecond: int = 0,
    ) -> DateTime:
        fixed = pendulum.datetime(
            year, month, day, hour, minute, second, microsecond, tz="UTC"
        )

        def mock_now(tz: str | None = None) -> DateTime:
            return fixed if tz == "UTC" else real_now(tz)

        monkeypatch.setattr("pendulum.now", mock_now)
        return fixed

    return _freeze
