"""Tests for patchwatch.core.errors module."""

from patchwatch.core.errors import ErrorCode


class TestErrorCodeValues:
    """Exit codes are a stable contract."""

    def test_values(self) -> None:
        assert ErrorCode.OK == 0
        assert ErrorCode.USER_ERROR == 1
        assert ErrorCode.CONFIG_ERROR == 2
        assert ErrorCode.NETWORK_ERROR == 4
        assert ErrorCode.UPDATES_AVAILABLE == 10

