"""Unit tests for the rain alert job entry point."""

from unittest.mock import patch

import pytest

from scripts.run_rain_alerts import main
from src.notifications.rain_alerts import RainAlertResult


@pytest.mark.parametrize(
    "result,expected",
    [
        (RainAlertResult(), 0),
        (RainAlertResult(groups=3, notified=2), 0),
        (RainAlertResult(groups=3, fetch_errors=1), 0),
        (RainAlertResult(groups=2, fetch_errors=2), 1),
    ],
)
def test_exit_code(result: RainAlertResult, expected: int) -> None:
    with (
        patch("scripts.run_rain_alerts.setup_logging"),
        patch("src.notifications.rain_alerts.check_rain_alerts", return_value=result) as mock_check,
    ):
        assert main() == expected

    mock_check.assert_called_once_with()
