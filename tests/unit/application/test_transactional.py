"""Unit tests for TransactionalMiddleware."""

from __future__ import annotations

import asyncio
import dataclasses
from typing import Any

import pytest
import structlog
from structlog.testing import capture_logs

from mp_mediator.application.pipeline import Pipeline, TransactionalMiddleware
from mp_mediator.config import TransactionSettings
from mp_mediator.kernel.ddd import UnitOfWork, UnitOfWorkState
from mp_mediator.kernel.errors import DomainError, PostCommitError, RollbackError
from mp_mediator.testing.fakes import InMemoryUnitOfWork, InMemoryUnitOfWorkProvider


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


@dataclasses.dataclass
class Deposit:
    account_id: str
    amount: int


@dataclasses.dataclass
class Withdraw:
    account_id: str
    amount: int


@dataclasses.dataclass
class Login:
    user: str
    password: str


class InsufficientFunds(DomainError):
    default_code = "insufficient_funds"


def run(middleware: TransactionalMiddleware, request: Any, handler: Any) -> Any:
    return asyncio.run(Pipeline().add(middleware).execute(request, handler))


class HookRecorder:
    def __init__(self, error: Exception | None = None) -> None:
        self.calls: list[tuple[str, UnitOfWork]] = []
        self.error = error

    async def __call__(self, transaction_id: str, uow: UnitOfWork) -> None:
        self.calls.append((transaction_id, uow))
        if self.error is not None:
            raise self.error


# ---------------------------------------------------------------------------
# New scope: success path
# ---------------------------------------------------------------------------


class TestCommitPath:
    def test_commits_once_and_returns_response_unchanged(self) -> None:
        provider = InMemoryUnitOfWorkProvider()
        response = object()

        async def handler(request: Deposit) -> object:
            return response

        result = run(TransactionalMiddleware(provider), Deposit("a-1", 10), handler)

        assert result is response
        assert len(provider.created) == 1
        uow = provider.last
        assert uow.commit_calls == 1
        assert uow.rollback_calls == 0
        assert uow.release_calls == 1
        assert uow.state is UnitOfWorkState.RELEASED

    def test_handler_runs_with_unit_of_work_ambient(self) -> None:
        provider = InMemoryUnitOfWorkProvider()
        seen: list[UnitOfWork | None] = []

        async def handler(request: Deposit) -> None:
            seen.append(provider.get_current())

        run(TransactionalMiddleware(provider), Deposit("a-1", 10), handler)

        assert seen == [provider.last]
        assert provider.get_current() is None

    def test_ambient_is_cleared_after_request(self) -> None:
        provider = InMemoryUnitOfWorkProvider()

        async def _run() -> UnitOfWork | None:
            async def handler(request: Deposit) -> str:
                return "ok"

            await Pipeline().add(TransactionalMiddleware(provider)).execute(Deposit("a", 1), handler)
            return provider.get_current()

        assert asyncio.run(_run()) is None

    def test_commit_happens_after_handler(self) -> None:
        provider = InMemoryUnitOfWorkProvider()
        order: list[str] = []

        async def handler(request: Deposit) -> None:
            order.append(f"handler:{provider.last.commit_calls}")

        run(TransactionalMiddleware(provider), Deposit("a-1", 10), handler)

        assert order == ["handler:0"]
        assert provider.last.commit_calls == 1

    def test_transaction_context_bound_during_handler(self) -> None:
        provider = InMemoryUnitOfWorkProvider()
        captured: list[dict[str, Any]] = []

        async def handler(request: Deposit) -> None:
            captured.append(structlog.contextvars.get_contextvars())

        run(TransactionalMiddleware(provider), Deposit("a-1", 10), handler)

        assert captured[0]["transaction_context"] == provider.last.id
        assert "transaction_context" not in structlog.contextvars.get_contextvars()


# ---------------------------------------------------------------------------
# New scope: failure paths
# ---------------------------------------------------------------------------


class TestRollbackPath:
    def test_handler_failure_rolls_back_and_propagates_same_error(self) -> None:
        provider = InMemoryUnitOfWorkProvider()
        error = InsufficientFunds("insufficient funds")

        async def handler(request: Withdraw) -> None:
            raise error

        with pytest.raises(InsufficientFunds) as exc_info:
            run(TransactionalMiddleware(provider), Withdraw("a-1", 500), handler)

        assert exc_info.value is error
        assert exc_info.value.message == "insufficient funds"
        uow = provider.last
        assert uow.rollback_calls == 1
        assert uow.commit_calls == 0
        assert uow.release_calls == 1

    def test_commit_failure_rolls_back_and_propagates_commit_error(self) -> None:
        commit_error = RuntimeError("deadlock detected")
        provider = InMemoryUnitOfWorkProvider(commit_error=commit_error)

        async def handler(request: Deposit) -> str:
            return "ok"

        with pytest.raises(RuntimeError) as exc_info:
            run(TransactionalMiddleware(provider), Deposit("a-1", 10), handler)

        assert exc_info.value is commit_error
        uow = provider.last
        assert uow.commit_calls == 1
        assert uow.rollback_calls == 1
        assert uow.release_calls == 1
        assert uow.state is UnitOfWorkState.RELEASED

    def test_release_failure_does_not_replace_handler_error(self) -> None:
        provider = InMemoryUnitOfWorkProvider(release_error=OSError("close failed"))
        error = InsufficientFunds("insufficient funds")

        async def handler(request: Withdraw) -> None:
            raise error

        with pytest.raises(InsufficientFunds) as exc_info:
            run(TransactionalMiddleware(provider), Withdraw("a-1", 500), handler)

        assert exc_info.value is error
        assert provider.last.rollback_calls == 1
        assert provider.last.state is UnitOfWorkState.RELEASED

    def test_rollback_failure_keeps_both_errors(self) -> None:
        original = InsufficientFunds("insufficient funds")
        rollback_error = ConnectionResetError("connection lost")
        provider = InMemoryUnitOfWorkProvider(rollback_error=rollback_error)

        async def handler(request: Withdraw) -> None:
            raise original

        with pytest.raises(RollbackError) as exc_info:
            run(TransactionalMiddleware(provider), Withdraw("a-1", 500), handler)

        err = exc_info.value
        assert err.original_error is original
        assert err.__cause__ is rollback_error
        assert err.cause is rollback_error
        assert err.transaction_id == provider.last.id
        assert provider.last.release_calls == 1

    def test_rollback_failure_after_commit_failure(self) -> None:
        commit_error = RuntimeError("commit failed")
        provider = InMemoryUnitOfWorkProvider(
            commit_error=commit_error,
            rollback_error=RuntimeError("rollback failed"),
        )

        async def handler(request: Deposit) -> str:
            return "ok"

        with pytest.raises(RollbackError) as exc_info:
            run(TransactionalMiddleware(provider), Deposit("a-1", 10), handler)

        assert exc_info.value.original_error is commit_error
        assert provider.last.release_calls == 1

    def test_cancellation_rolls_back_and_releases(self) -> None:
        provider = InMemoryUnitOfWorkProvider()

        async def _run() -> None:
            started = asyncio.Event()

            async def handler(request: Deposit) -> None:
                started.set()
                await asyncio.sleep(10)

            pipeline = Pipeline().add(TransactionalMiddleware(provider))
            task = asyncio.create_task(pipeline.execute(Deposit("a-1", 10), handler))
            await started.wait()
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        asyncio.run(_run())
        uow = provider.last
        assert uow.rollback_calls == 1
        assert uow.commit_calls == 0
        assert uow.release_calls == 1

    def test_no_retry_on_failure(self) -> None:
        provider = InMemoryUnitOfWorkProvider()
        calls: list[int] = []

        async def handler(request: Deposit) -> None:
            calls.append(1)
            raise RuntimeError("transient")

        with pytest.raises(RuntimeError):
            run(TransactionalMiddleware(provider), Deposit("a-1", 10), handler)

        assert calls == [1]
        assert len(provider.created) == 1


# ---------------------------------------------------------------------------
# Ambient unit of work
# ---------------------------------------------------------------------------


class TestAmbientReuse:
    def test_reuses_ambient_without_creating(self) -> None:
        provider = InMemoryUnitOfWorkProvider()
        ambient = InMemoryUnitOfWork("ambient-u")
        middleware = TransactionalMiddleware(provider)
        seen: list[UnitOfWork | None] = []

        async def handler(request: Deposit) -> str:
            seen.append(provider.get_current())
            return "V"

        async def _run() -> str:
            with provider.activate(ambient):
                return await Pipeline().add(middleware).execute(Deposit("a-1", 10), handler)

        assert asyncio.run(_run()) == "V"
        assert provider.created == []
        assert seen == [ambient]
        assert ambient.commit_calls == 0
        assert ambient.rollback_calls == 0
        assert ambient.release_calls == 0
        assert provider.get_current_calls >= 1

    def test_ambient_failure_propagates_without_rollback(self) -> None:
        provider = InMemoryUnitOfWorkProvider()
        ambient = InMemoryUnitOfWork()
        error = InsufficientFunds("insufficient funds")

        async def handler(request: Withdraw) -> None:
            raise error

        async def _run() -> None:
            with provider.activate(ambient):
                await Pipeline().add(TransactionalMiddleware(provider)).execute(
                    Withdraw("a-1", 500), handler
                )

        with pytest.raises(InsufficientFunds) as exc_info:
            asyncio.run(_run())

        assert exc_info.value is error
        assert ambient.rollback_calls == 0
        assert ambient.state is UnitOfWorkState.OPEN
        assert provider.created == []

    def test_ambient_path_skips_post_commit_hook(self) -> None:
        provider = InMemoryUnitOfWorkProvider()
        hook = HookRecorder()

        async def handler(request: Deposit) -> str:
            return "ok"

        async def _run() -> None:
            with provider.activate(InMemoryUnitOfWork()):
                await TransactionalMiddleware(provider, post_commit=hook)(Deposit("a", 1), handler)

        asyncio.run(_run())
        assert hook.calls == []

    def test_concurrent_requests_get_separate_units_of_work(self) -> None:
        provider = InMemoryUnitOfWorkProvider()
        middleware = TransactionalMiddleware(provider)
        seen: dict[str, str] = {}

        async def handler(request: Deposit) -> None:
            await asyncio.sleep(0)
            current = provider.get_current()
            assert current is not None
            seen[request.account_id] = current.id

        async def _run() -> None:
            pipeline = Pipeline().add(middleware)
            await asyncio.gather(
                pipeline.execute(Deposit("a", 1), handler),
                pipeline.execute(Deposit("b", 2), handler),
            )

        asyncio.run(_run())
        assert len(provider.created) == 2
        assert seen["a"] != seen["b"]
        assert all(u.commit_calls == 1 and u.release_calls == 1 for u in provider.created)

    def test_background_task_after_request_opens_new_unit_of_work(self) -> None:
        provider = InMemoryUnitOfWorkProvider()
        pipeline = Pipeline().add(TransactionalMiddleware(provider))
        outer_done = asyncio.Event()

        async def follow_up(request: Deposit) -> UnitOfWork | None:
            return provider.get_current()

        async def background() -> UnitOfWork | None:
            await outer_done.wait()
            return await pipeline.execute(Deposit("a-1", 1), follow_up)

        async def handler(request: Deposit) -> asyncio.Task[UnitOfWork | None]:
            return asyncio.create_task(background())

        async def _run() -> UnitOfWork | None:
            task = await pipeline.execute(Deposit("a-1", 10), handler)
            outer_done.set()
            return await task

        seen = asyncio.run(_run())
        assert len(provider.created) == 2
        first, second = provider.created
        assert seen is second
        assert first.state is UnitOfWorkState.RELEASED
        assert all(u.commit_calls == 1 and u.release_calls == 1 for u in provider.created)


# ---------------------------------------------------------------------------
# Post-commit hook
# ---------------------------------------------------------------------------


class TestPostCommitHook:
    def test_called_once_with_committed_transaction_id(self) -> None:
        provider = InMemoryUnitOfWorkProvider()
        hook = HookRecorder()

        async def handler(request: Deposit) -> str:
            return "ok"

        run(TransactionalMiddleware(provider, post_commit=hook), Deposit("a-1", 10), handler)

        uow = provider.last
        assert len(hook.calls) == 1
        assert hook.calls[0][0] == uow.id
        assert hook.calls[0][1] is uow

    def test_runs_after_commit_and_before_release_outside_ambient(self) -> None:
        provider = InMemoryUnitOfWorkProvider()
        observed: list[tuple[UnitOfWorkState, UnitOfWork | None]] = []

        async def hook(transaction_id: str, uow: UnitOfWork) -> None:
            observed.append((uow.state, provider.get_current()))

        async def handler(request: Deposit) -> str:
            return "ok"

        run(TransactionalMiddleware(provider, post_commit=hook), Deposit("a-1", 10), handler)

        assert observed == [(UnitOfWorkState.COMMITTED, None)]

    def test_not_called_when_handler_fails(self) -> None:
        provider = InMemoryUnitOfWorkProvider()
        hook = HookRecorder()

        async def handler(request: Deposit) -> None:
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            run(TransactionalMiddleware(provider, post_commit=hook), Deposit("a-1", 10), handler)

        assert hook.calls == []

    def test_not_called_when_commit_fails(self) -> None:
        provider = InMemoryUnitOfWorkProvider(commit_error=RuntimeError("commit failed"))
        hook = HookRecorder()

        async def handler(request: Deposit) -> str:
            return "ok"

        with pytest.raises(RuntimeError):
            run(TransactionalMiddleware(provider, post_commit=hook), Deposit("a-1", 10), handler)

        assert hook.calls == []

    def test_hook_failure_is_post_commit_error_without_rollback(self) -> None:
        provider = InMemoryUnitOfWorkProvider()
        cause = ValueError("broker down")
        hook = HookRecorder(error=cause)

        async def handler(request: Deposit) -> str:
            return "ok"

        with pytest.raises(PostCommitError) as exc_info:
            run(TransactionalMiddleware(provider, post_commit=hook), Deposit("a-1", 10), handler)

        uow = provider.last
        assert exc_info.value.transaction_id == uow.id
        assert exc_info.value.__cause__ is cause
        assert uow.commit_calls == 1
        assert uow.rollback_calls == 0
        assert uow.release_calls == 1


# ---------------------------------------------------------------------------
# Factory override
# ---------------------------------------------------------------------------


class TestUnitOfWorkFactory:
    def test_custom_factory_replaces_provider_create(self) -> None:
        provider = InMemoryUnitOfWorkProvider()
        custom = InMemoryUnitOfWork("custom-id")

        async def handler(request: Deposit) -> str:
            current = provider.get_current()
            assert current is custom
            return "ok"

        middleware = TransactionalMiddleware(provider, unit_of_work_factory=lambda: custom)
        assert run(middleware, Deposit("a-1", 10), handler) == "ok"
        assert provider.created == []
        assert custom.commit_calls == 1
        assert custom.release_calls == 1


# ---------------------------------------------------------------------------
# Scenarios
# ---------------------------------------------------------------------------


class TestScenarios:
    def test_r1_value_returned_and_committed(self) -> None:
        provider = InMemoryUnitOfWorkProvider()

        async def handler(request: Deposit) -> int:
            return 42

        assert run(TransactionalMiddleware(provider), Deposit("r1", 1), handler) == 42
        assert provider.last.commit_calls == 1

    def test_r2_insufficient_funds(self) -> None:
        provider = InMemoryUnitOfWorkProvider()

        async def handler(request: Withdraw) -> None:
            raise InsufficientFunds("insufficient funds")

        with pytest.raises(InsufficientFunds, match="insufficient funds"):
            run(TransactionalMiddleware(provider), Withdraw("r2", 1_000), handler)

        assert provider.last.rollback_calls == 1
        assert provider.last.commit_calls == 0

    def test_r3_ambient_unit_of_work(self) -> None:
        provider = InMemoryUnitOfWorkProvider()
        u = InMemoryUnitOfWork("U")

        async def handler(request: Deposit) -> str:
            return "done"

        async def _run() -> str:
            with provider.activate(u):
                assert provider.get_current() is u
                return await TransactionalMiddleware(provider)(Deposit("r3", 1), handler)

        assert asyncio.run(_run()) == "done"
        assert provider.created == []
        assert (u.commit_calls, u.rollback_calls) == (0, 0)


# ---------------------------------------------------------------------------
# Diagnostics
# ---------------------------------------------------------------------------


class TestDiagnostics:
    def test_begin_commit_records_carry_transaction_id_and_request(self) -> None:
        provider = InMemoryUnitOfWorkProvider()

        async def handler(request: Deposit) -> str:
            return "ok"

        with capture_logs() as logs:
            run(TransactionalMiddleware(provider), Deposit("a-1", 10), handler)

        events = [e["event"] for e in logs]
        assert events.index("transaction.begin") < events.index("transaction.commit")
        assert "transaction.committed" in events
        for entry in logs:
            if entry["event"].startswith("transaction."):
                assert entry["transaction_id"] == provider.last.id
                assert entry["request"] == "Deposit"

    def test_failure_logged_at_error_level(self) -> None:
        provider = InMemoryUnitOfWorkProvider()

        async def handler(request: Withdraw) -> None:
            raise InsufficientFunds("insufficient funds")

        with capture_logs() as logs:
            with pytest.raises(InsufficientFunds):
                run(TransactionalMiddleware(provider), Withdraw("a-1", 5), handler)

        failed = [e for e in logs if e["event"] == "transaction.failed"]
        assert len(failed) == 1
        assert failed[0]["log_level"] == "error"
        assert failed[0]["request"] == "Withdraw"
        assert any(e["event"] == "transaction.rolled_back" for e in logs)

    def test_payload_logged_and_redacted_when_enabled(self) -> None:
        provider = InMemoryUnitOfWorkProvider()
        settings = TransactionSettings(log_request_payload=True)

        async def handler(request: Login) -> str:
            return "ok"

        with capture_logs() as logs:
            run(TransactionalMiddleware(provider, settings=settings), Login("alice", "s3cr3t"), handler)

        begin = next(e for e in logs if e["event"] == "transaction.begin")
        assert begin["payload"] == {"user": "alice", "password": "[REDACTED]"}

    def test_failure_record_carries_redacted_payload(self) -> None:
        provider = InMemoryUnitOfWorkProvider()
        settings = TransactionSettings(log_request_payload=True)

        async def handler(request: Login) -> str:
            raise InsufficientFunds("insufficient funds")

        with capture_logs() as logs:
            with pytest.raises(InsufficientFunds):
                run(
                    TransactionalMiddleware(provider, settings=settings),
                    Login("alice", "s3cr3t"),
                    handler,
                )

        failed = next(e for e in logs if e["event"] == "transaction.failed")
        assert failed["payload"] == {"user": "alice", "password": "[REDACTED]"}

    def test_payload_omitted_by_default(self) -> None:
        provider = InMemoryUnitOfWorkProvider()

        async def handler(request: Login) -> str:
            return "ok"

        with capture_logs() as logs:
            run(TransactionalMiddleware(provider), Login("alice", "s3cr3t"), handler)

        begin = next(e for e in logs if e["event"] == "transaction.begin")
        assert "payload" not in begin

    def test_extra_sensitive_fields_from_settings(self) -> None:
        provider = InMemoryUnitOfWorkProvider()
        settings = TransactionSettings(log_request_payload=True, sensitive_fields=["Account_ID"])

        async def handler(request: Deposit) -> str:
            return "ok"

        with capture_logs() as logs:
            run(TransactionalMiddleware(provider, settings=settings), Deposit("a-1", 10), handler)

        begin = next(e for e in logs if e["event"] == "transaction.begin")
        assert begin["payload"] == {"account_id": "[REDACTED]", "amount": 10}

    def test_configured_log_level_used_for_lifecycle_records(self) -> None:
        provider = InMemoryUnitOfWorkProvider()
        settings = TransactionSettings(log_level="debug")

        async def handler(request: Deposit) -> str:
            return "ok"

        with capture_logs() as logs:
            run(TransactionalMiddleware(provider, settings=settings), Deposit("a-1", 10), handler)

        begin = next(e for e in logs if e["event"] == "transaction.begin")
        assert begin["log_level"] == "debug"
