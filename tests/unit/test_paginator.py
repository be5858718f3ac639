"""
Tests for cursor pagination and pacing.

All sleeps go through an injected MagicMock, so no test waits.
"""

from unittest.mock import MagicMock, call

import pytest

from models import ArchiveError, ErrorKind, FetchFailedError
from paginator import Pacer, drain, paginate
from tests.helpers import FakePages


class TestPacer:
    """Fixed delay between successive waits."""

    def test_first_wait_is_free(self) -> None:
        sleep = MagicMock()
        Pacer(250, sleep).wait()
        sleep.assert_not_called()

    def test_n_waits_cost_n_minus_one_sleeps(self) -> None:
        sleep = MagicMock()
        pacer = Pacer(250, sleep)
        for _ in range(4):
            pacer.wait()
        assert sleep.call_args_list == [call(0.25)] * 3

    def test_zero_delay_never_sleeps(self) -> None:
        sleep = MagicMock()
        pacer = Pacer(0, sleep)
        for _ in range(3):
            pacer.wait()
        sleep.assert_not_called()

    def test_negative_delay_rejected(self) -> None:
        with pytest.raises(ValueError):
            Pacer(-1)


class TestPaginate:
    """Test the lazy item stream."""

    def test_all_pages_in_order(self) -> None:
        fetch = FakePages([[1, 2], [3, 4], [5]])
        sleep = MagicMock()

        items = list(paginate(fetch, delay_ms=100, sleep=sleep))

        assert items == [1, 2, 3, 4, 5]
        assert fetch.cursors == [None, "c1", "c2"]
        assert sleep.call_count == 2  # N pages, N-1 sleeps

    def test_single_page_no_sleep(self) -> None:
        sleep = MagicMock()
        assert list(paginate(FakePages([["a"]]), delay_ms=100, sleep=sleep)) == ["a"]
        sleep.assert_not_called()

    def test_empty_collection(self) -> None:
        fetch = FakePages([[]])
        assert list(paginate(fetch)) == []
        assert fetch.calls == 1

    def test_max_results_truncates_exactly(self) -> None:
        fetch = FakePages([[1, 2, 3], [4, 5, 6], [7]])

        items = list(paginate(fetch, max_results=4))

        assert items == [1, 2, 3, 4]
        assert fetch.calls == 2  # no fetch beyond what was needed

    def test_max_results_on_page_boundary(self) -> None:
        fetch = FakePages([[1, 2], [3, 4]])
        assert list(paginate(fetch, max_results=2)) == [1, 2]
        assert fetch.calls == 1

    def test_max_results_larger_than_collection(self) -> None:
        assert list(paginate(FakePages([[1], [2]]), max_results=10)) == [1, 2]

    @pytest.mark.parametrize("bad", [0, -5])
    def test_non_positive_max_results_raises_immediately(self, bad: int) -> None:
        fetch = FakePages([[1]])
        with pytest.raises(ValueError):
            paginate(fetch, max_results=bad)
        assert fetch.calls == 0

    def test_empty_string_cursor_ends_enumeration(self) -> None:
        """Slack hands out "" on the last page."""
        from models import Page

        fetch = MagicMock(return_value=Page(items=[1], next_cursor=""))
        assert list(paginate(fetch)) == [1]
        fetch.assert_called_once_with(None)

    def test_is_lazy(self) -> None:
        fetch = FakePages([[1], [2]])
        stream = paginate(fetch)
        assert fetch.calls == 0
        assert next(stream) == 1
        assert fetch.calls == 1

    def test_failure_keeps_earlier_items(self) -> None:
        cause = ArchiveError(ErrorKind.RATE_LIMITED, "slow down")
        fetch = FakePages([[1, 2], [3], cause])
        seen: list[int] = []

        with pytest.raises(FetchFailedError) as exc_info:
            for item in paginate(fetch, collection="INBOX"):
                seen.append(item)

        assert seen == [1, 2, 3]
        error = exc_info.value
        assert error.kind == ErrorKind.FETCH_FAILED
        assert error.cause is cause
        assert error.pages_fetched == 2
        assert error.items_yielded == 3
        assert error.details["cause_kind"] == "rate_limited"
        assert error.details["collection"] == "INBOX"

    def test_failure_on_first_page(self) -> None:
        fetch = FakePages([RuntimeError("boom")])
        with pytest.raises(FetchFailedError) as exc_info:
            list(paginate(fetch))
        assert exc_info.value.items_yielded == 0
        assert exc_info.value.details["cause_kind"] == "unknown"


class TestDrain:
    """Consuming a whole collection."""

    def test_complete(self) -> None:
        collection = drain(paginate(FakePages([[1, 2], [3]])))
        assert collection.items == [1, 2, 3]
        assert collection.complete

    def test_partial_on_failure(self) -> None:
        fetch = FakePages([[1, 2], ArchiveError(ErrorKind.NETWORK_ERROR, "reset")])

        collection = drain(paginate(fetch, collection="C123"))

        assert collection.items == [1, 2]
        assert not collection.complete
        assert collection.error is not None
        assert collection.error.collection == "C123"

    def test_plain_iterable(self) -> None:
        assert drain([{"a": 1}]).items == [{"a": 1}]
