"""Tests for easy_release.core.errors module."""

from easy_release.core.errors import ErrorCode


class TestErrorCode:
    def test_values_are_stable(self) -> None:
        assert int(ErrorCode.OK) == 0
        assert int(ErrorCode.USAGE_ERROR) == 1
        assert int(ErrorCode.VERSION_ERROR) == 2
        assert int(ErrorCode.FILE_ERROR) == 3
        assert int(ErrorCode.CHECK_FAILED) == 4
        assert int(ErrorCode.STEP_FAILED) == 5

    def test_codes_are_distinct(self) -> None:
        assert len({int(c) for c in ErrorCode}) == len(ErrorCode)

    def test_success_and_error(self) -> None:
        assert ErrorCode.OK.is_success
        assert not ErrorCode.OK.is_error
        for code in ErrorCode:
            if code is not ErrorCode.OK:
                assert code.is_error

    def test_str(self) -> None:
        assert str(ErrorCode.CHECK_FAILED) == "check failed"
