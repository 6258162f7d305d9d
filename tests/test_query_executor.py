"""Test QueryExecutor"""
import asyncio
import pytest
from unittest.mock import AsyncMock, Mock, patch
from postgrest.exceptions import APIError
from umrohdesk.services.query_executor import (
    DEFAULT_ERROR_MESSAGE,
    QueryExecutor,
    QueryOptions,
    QueryResult,
    QueryStatus,
    extract_error_message,
)


def make_operation(*outcomes):
    """Async operation yielding outcomes in order; exceptions are raised"""
    calls = {"count": 0}

    async def operation():
        outcome = outcomes[min(calls["count"], len(outcomes) - 1)]
        calls["count"] += 1
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    operation.calls = calls
    return operation


@pytest.fixture
def no_sleep():
    """Record backoff delays without waiting"""
    with patch("umrohdesk.services.query_executor.asyncio.sleep", new_callable=AsyncMock) as mock:
        yield mock


@pytest.fixture
def notifier():
    return Mock()


@pytest.mark.asyncio
class TestRetryBudget:
    async def test_permanent_failure_uses_all_attempts(self, no_sleep, notifier):
        """maxRetries=2 -> 3 invocations, delays 0.1 then 0.2"""
        executor = QueryExecutor(notifier, QueryOptions(max_retries=2, retry_delay=0.1))
        operation = make_operation(QueryResult(None, {"message": "network down"}))

        result = await executor.execute(operation)

        assert result is None
        assert operation.calls["count"] == 3
        assert [c.args[0] for c in no_sleep.await_args_list] == pytest.approx([0.1, 0.2])
        assert executor.error == "network down"
        assert executor.loading is False
        assert executor.status == QueryStatus.FAILED
        notifier.assert_called_once_with(DEFAULT_ERROR_MESSAGE, "network down")

    async def test_success_after_failures(self, no_sleep, notifier):
        executor = QueryExecutor(notifier, QueryOptions(max_retries=2, retry_delay=0.1))
        operation = make_operation(
            QueryResult(None, {"message": "busy"}),
            QueryResult(None, {"message": "busy"}),
            QueryResult({"id": 7}, None),
        )

        result = await executor.execute(operation)

        assert result == {"id": 7}
        assert executor.data == {"id": 7}
        assert executor.error is None
        assert executor.status == QueryStatus.SUCCEEDED
        assert operation.calls["count"] == 3
        notifier.assert_not_called()

    async def test_success_first_try_does_not_sleep(self, no_sleep, notifier):
        executor = QueryExecutor(notifier)
        operation = make_operation(QueryResult([1, 2], None))

        assert await executor.execute(operation) == [1, 2]
        assert operation.calls["count"] == 1
        no_sleep.assert_not_awaited()

    async def test_no_attempts_after_success(self, no_sleep):
        executor = QueryExecutor(options=QueryOptions(max_retries=5))
        operation = make_operation(QueryResult(None, "fail"), QueryResult("ok", None), QueryResult(None, "late"))

        await executor.execute(operation)

        assert operation.calls["count"] == 2
        assert executor.data == "ok"

    async def test_zero_retries_uses_fallback_message(self, no_sleep, notifier):
        executor = QueryExecutor(notifier, QueryOptions(max_retries=0, error_message="Gagal memuat paket"))
        operation = make_operation(QueryResult(None, {}))

        await executor.execute(operation)

        assert operation.calls["count"] == 1
        assert executor.error == "Gagal memuat paket"
        notifier.assert_called_once_with("Gagal memuat paket", "Gagal memuat paket")
        no_sleep.assert_not_awaited()

    async def test_raised_error_treated_like_returned_failure(self, no_sleep, notifier):
        executor = QueryExecutor(notifier, QueryOptions(max_retries=1, retry_delay=0.5))
        operation = make_operation(RuntimeError("timeout"))

        result = await executor.execute(operation)

        assert result is None
        assert operation.calls["count"] == 2
        assert executor.error == "timeout"
        no_sleep.assert_awaited_once_with(0.5)
        notifier.assert_called_once_with(DEFAULT_ERROR_MESSAGE, "timeout")

    async def test_exception_without_message_falls_back(self, no_sleep):
        executor = QueryExecutor(options=QueryOptions(max_retries=0))
        await executor.execute(make_operation(ValueError()))
        assert executor.error == DEFAULT_ERROR_MESSAGE

    async def test_postgrest_error_message(self, no_sleep):
        executor = QueryExecutor(options=QueryOptions(max_retries=0))
        error = APIError({"message": "relation \"bookings\" does not exist", "code": "42P01"})

        await executor.execute(make_operation(QueryResult(None, error)))

        assert executor.error == 'relation "bookings" does not exist'

    async def test_backoff_grows_linearly(self, no_sleep):
        executor = QueryExecutor(options=QueryOptions(max_retries=4, retry_delay=1.0))
        await executor.execute(make_operation(QueryResult(None, "down")))

        delays = [c.args[0] for c in no_sleep.await_args_list]
        assert delays == [1.0, 2.0, 3.0, 4.0]
        assert delays == sorted(delays)


@pytest.mark.asyncio
class TestState:
    async def test_loading_true_while_operation_runs(self, no_sleep):
        executor = QueryExecutor()
        seen = []

        async def operation():
            seen.append((executor.loading, executor.status))
            return QueryResult("done", None)

        await executor.execute(operation)

        assert seen == [(True, QueryStatus.RUNNING)]
        assert executor.loading is False

    async def test_loading_true_during_backoff(self):
        executor = QueryExecutor(options=QueryOptions(max_retries=1, retry_delay=0.05))
        operation = make_operation(QueryResult(None, "busy"), QueryResult("ok", None))

        task = asyncio.create_task(executor.execute(operation))
        await asyncio.sleep(0.01)
        assert operation.calls["count"] == 1
        assert executor.loading is True

        assert await task == "ok"
        assert executor.loading is False

    async def test_listener_sees_start_and_end(self, no_sleep):
        executor = QueryExecutor(options=QueryOptions(max_retries=2))
        states = []
        executor.add_listener(lambda: states.append((executor.loading, executor.error)))

        await executor.execute(make_operation(QueryResult(None, "down")))

        # No intermediate notifications for retries
        assert states == [(True, None), (False, "down")]

    async def test_error_cleared_on_next_execute(self, no_sleep):
        executor = QueryExecutor(options=QueryOptions(max_retries=0))
        await executor.execute(make_operation(QueryResult(None, "down")))
        assert executor.error == "down"

        seen = []

        async def operation():
            seen.append(executor.error)
            return QueryResult("ok", None)

        await executor.execute(operation)
        assert seen == [None]
        assert executor.error is None

    async def test_failure_keeps_previous_data(self, no_sleep):
        executor = QueryExecutor(options=QueryOptions(max_retries=0))
        await executor.execute(make_operation(QueryResult(["old"], None)))
        await executor.execute(make_operation(QueryResult(None, "down")))

        assert executor.data == ["old"]
        assert executor.error == "down"

    async def test_set_data_bypasses_loading_and_error(self, no_sleep):
        executor = QueryExecutor(options=QueryOptions(max_retries=0))
        await executor.execute(make_operation(QueryResult(None, "down")))
        listener = Mock()
        executor.add_listener(listener)

        executor.set_data([{"id": 1}])

        assert executor.data == [{"id": 1}]
        assert executor.error == "down"
        assert executor.loading is False
        assert executor.status == QueryStatus.FAILED
        listener.assert_called_once()

    async def test_initial_state(self):
        executor = QueryExecutor()
        assert executor.data is None
        assert executor.loading is False
        assert executor.error is None
        assert executor.status == QueryStatus.IDLE
        assert executor.last_operation is None

    async def test_plain_tuple_result(self, no_sleep):
        executor = QueryExecutor()

        async def operation():
            return ("value", None)

        assert await executor.execute(operation) == "value"

    async def test_none_value_success(self, no_sleep):
        executor = QueryExecutor()
        await executor.execute(make_operation(QueryResult(None, None)))
        assert executor.status == QueryStatus.SUCCEEDED
        assert executor.error is None

    @pytest.mark.parametrize("falsy_error", [False, 0, 0.0, ""])
    async def test_falsy_scalar_error_is_success(self, no_sleep, falsy_error):
        executor = QueryExecutor()
        operation = make_operation(QueryResult("rows", falsy_error))

        assert await executor.execute(operation) == "rows"
        assert executor.status == QueryStatus.SUCCEEDED
        assert operation.calls["count"] == 1

    async def test_empty_mapping_error_is_failure(self, no_sleep):
        executor = QueryExecutor(options=QueryOptions(max_retries=0))

        assert await executor.execute(make_operation(QueryResult(None, {}))) is None
        assert executor.status == QueryStatus.FAILED
        assert executor.error == DEFAULT_ERROR_MESSAGE


@pytest.mark.asyncio
class TestRetry:
    async def test_retry_replays_same_operation_with_fresh_budget(self, no_sleep, notifier):
        executor = QueryExecutor(notifier, QueryOptions(max_retries=2))
        operation = make_operation(QueryResult(None, "down"))
        await executor.execute(operation)
        assert operation.calls["count"] == 3

        await executor.retry()

        assert executor.last_operation is operation
        assert operation.calls["count"] == 6
        assert notifier.call_count == 2

    async def test_retry_after_failure_can_succeed(self, no_sleep, notifier):
        executor = QueryExecutor(notifier, QueryOptions(max_retries=0))
        operation = make_operation(QueryResult(None, "down"), QueryResult("ok", None))
        await executor.execute(operation)

        assert await executor.retry() == "ok"
        assert executor.error is None
        assert executor.status == QueryStatus.SUCCEEDED

    async def test_retry_without_execute_is_noop(self, notifier):
        executor = QueryExecutor(notifier)
        assert await executor.retry() is None
        assert executor.status == QueryStatus.IDLE
        notifier.assert_not_called()

    async def test_execute_overwrites_remembered_operation(self, no_sleep):
        executor = QueryExecutor()
        first = make_operation(QueryResult(1, None))
        second = make_operation(QueryResult(2, None))
        await executor.execute(first)
        await executor.execute(second)

        await executor.retry()

        assert first.calls["count"] == 1
        assert second.calls["count"] == 2


@pytest.mark.asyncio
class TestNotificationsAndErrors:
    async def test_no_notifier_is_fine(self, no_sleep):
        executor = QueryExecutor(options=QueryOptions(max_retries=0))
        assert await executor.execute(make_operation(QueryResult(None, "down"))) is None
        assert executor.error == "down"

    async def test_failing_notifier_does_not_escape(self, no_sleep):
        notifier = Mock(side_effect=RuntimeError("widget gone"))
        executor = QueryExecutor(notifier, QueryOptions(max_retries=0))

        assert await executor.execute(make_operation(QueryResult(None, "down"))) is None
        assert executor.error == "down"

    async def test_failing_listener_does_not_escape(self, no_sleep):
        executor = QueryExecutor()
        executor.add_listener(Mock(side_effect=RuntimeError("boom")))
        assert await executor.execute(make_operation(QueryResult("ok", None))) == "ok"

    async def test_cancellation_propagates(self):
        executor = QueryExecutor()

        async def operation():
            await asyncio.sleep(10)
            return QueryResult("never", None)

        task = asyncio.create_task(executor.execute(operation))
        await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    async def test_overlapping_executions_last_settled_wins(self):
        """Known race: no generation guard, whichever settles last owns the state"""
        executor = QueryExecutor()

        async def slow():
            await asyncio.sleep(0.05)
            return QueryResult("slow", None)

        async def fast():
            return QueryResult("fast", None)

        results = await asyncio.gather(executor.execute(slow), executor.execute(fast))

        assert results == ["slow", "fast"]
        assert executor.data == "slow"
        assert executor.last_operation is fast
        assert executor.loading is False

    async def test_listener_removal(self, no_sleep):
        executor = QueryExecutor()
        listener = Mock()
        executor.add_listener(listener)
        executor.add_listener(listener)
        executor.remove_listener(listener)

        await executor.execute(make_operation(QueryResult("ok", None)))

        listener.assert_not_called()


class TestExtractErrorMessage:
    def test_message_attribute(self):
        error = APIError({"message": "duplicate key", "code": "23505"})
        assert extract_error_message(error) == "duplicate key"

    def test_mapping(self):
        assert extract_error_message({"message": "bad request"}) == "bad request"
        assert extract_error_message({"code": "500"}) is None

    def test_exception(self):
        assert extract_error_message(TimeoutError("timeout")) == "timeout"
        assert extract_error_message(TimeoutError()) is None

    def test_string(self):
        assert extract_error_message("offline") == "offline"
        assert extract_error_message("   ") is None

    def test_none_and_unknown(self):
        assert extract_error_message(None) is None
        assert extract_error_message(object()) is None


class TestQueryOptions:
    def test_defaults(self):
        options = QueryOptions()
        assert options.max_retries == 2
        assert options.retry_delay == 1.0
        assert options.error_message == "Gagal memuat data"

    def test_delay_for(self):
        options = QueryOptions(retry_delay=0.25)
        assert options.delay_for(1) == 0.25
        assert options.delay_for(3) == 0.75

    def test_rejects_negative_values(self):
        with pytest.raises(ValueError):
            QueryOptions(max_retries=-1)
        with pytest.raises(ValueError):
            QueryOptions(retry_delay=-0.1)

    def test_from_settings(self):
        settings = Mock(query_max_retries=4, query_retry_delay=0.5, query_error_message="Gagal")
        options = QueryOptions.from_settings(settings)
        assert options == QueryOptions(max_retries=4, retry_delay=0.5, error_message="Gagal")

        override = QueryOptions.from_settings(settings, error_message="Gagal memuat booking")
        assert override.error_message == "Gagal memuat booking"
