"""
Tests for the local shutdown executor.

Real subprocesses are used with the current interpreter standing in for the
poweroff binary.
"""

import shlex
import sys
from datetime import datetime
from unittest.mock import AsyncMock, patch

import pytest

from autopoweroff.shutdown.executor import ShutdownExecutor, ShutdownResult, ShutdownStatus

PYTHON = shlex.quote(sys.executable)


class TestShutdownResult:
    """Test shutdown result data structure."""

    def test_successful_result_creation(self):
        result = ShutdownResult(status=ShutdownStatus.SUCCESS, command="poweroff", exit_code=0)
        assert result.success is True
        assert isinstance(result.timestamp, datetime)

    def test_skipped_counts_as_success(self):
        result = ShutdownResult(status=ShutdownStatus.SKIPPED, command="DRY RUN: poweroff")
        assert result.success is True

    def test_failed_result(self):
        result = ShutdownResult(
            status=ShutdownStatus.FAILED,
            command="poweroff",
            exit_code=1,
            error_message="Permission denied",
        )
        assert result.success is False
        assert result.error_message == "Permission denied"

    def test_result_to_dict(self):
        result = ShutdownResult(status=ShutdownStatus.TIMEOUT, command="poweroff", execution_time=30.0)
        result_dict = result.to_dict()
        assert result_dict['status'] == "timeout"
        assert result_dict['success'] is False
        assert result_dict['execution_time'] == 30.0
        assert 'timestamp' in result_dict


class TestShutdownExecutor:
    """Test shutdown executor operations."""

    def test_executor_defaults(self):
        executor = ShutdownExecutor()
        assert executor.command == "poweroff"
        assert executor.dry_run is False
        assert executor.invoked is False

    @pytest.mark.asyncio
    async def test_dry_run(self):
        executor = ShutdownExecutor(command="poweroff", dry_run=True)
        with patch('asyncio.create_subprocess_exec', new_callable=AsyncMock) as mock_exec:
            result = await executor.execute()

        assert result.status == ShutdownStatus.SKIPPED
        assert result.command == "DRY RUN: poweroff"
        mock_exec.assert_not_called()

    @pytest.mark.asyncio
    async def test_successful_command(self):
        executor = ShutdownExecutor(command=f"{PYTHON} -c \"print('bye')\"", timeout=10)
        result = await executor.execute()

        assert result.status == ShutdownStatus.SUCCESS
        assert result.exit_code == 0
        assert result.stdout.strip() == "bye"
        assert result.execution_time is not None

    @pytest.mark.asyncio
    async def test_non_zero_exit(self, caplog):
        executor = ShutdownExecutor(command=f"{PYTHON} -c \"import sys; sys.exit(3)\"", timeout=10)
        result = await executor.execute()

        assert result.status == ShutdownStatus.FAILED
        assert result.exit_code == 3
        assert result.error_message == "Command exited with code 3"
        assert any(r.levelname == "ERROR" for r in caplog.records)

    @pytest.mark.asyncio
    async def test_missing_binary(self):
        executor = ShutdownExecutor(command="/nonexistent/poweroff-binary")
        result = await executor.execute()

        assert result.status == ShutdownStatus.FAILED
        assert "Could not start" in result.error_message

    @pytest.mark.asyncio
    async def test_empty_command(self):
        result = await ShutdownExecutor(command="   ").execute()
        assert result.status == ShutdownStatus.FAILED
        assert result.error_message == "Shutdown command is empty"

    @pytest.mark.asyncio
    async def test_timeout(self):
        executor = ShutdownExecutor(command=f"{PYTHON} -c \"import time; time.sleep(30)\"", timeout=0.5)
        result = await executor.execute()

        assert result.status == ShutdownStatus.TIMEOUT
        assert result.error_message == "Command timed out after 0.5s"

    @pytest.mark.asyncio
    async def test_runs_at_most_once(self):
        executor = ShutdownExecutor(command=f"{PYTHON} -c \"import sys; sys.exit(1)\"", timeout=10)
        first = await executor.execute()

        with patch('asyncio.create_subprocess_exec', new_callable=AsyncMock) as mock_exec:
            second = await executor.execute()

        assert second is first
        assert executor.invoked is True
        mock_exec.assert_not_called()
