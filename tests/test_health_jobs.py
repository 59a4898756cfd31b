"""
Tests for the background health check loop.
"""
import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from shipquote.services.health_jobs import HealthCheckRunner
from shipquote.services.provider_health import SystemState, SystemStatus


def _status(state: SystemState) -> SystemStatus:
    return SystemStatus(status=state, active_count=0, total_count=0)


@pytest.fixture
def health_service():
    service = MagicMock()
    service.get_system_status = AsyncMock(return_value=_status(SystemState.ONLINE))
    return service


@pytest.mark.asyncio
async def test_run_once_records_latest(health_service):
    runner = HealthCheckRunner(health_service, interval_seconds=60)

    status = await runner.run_once()

    assert status.status == SystemState.ONLINE
    assert runner.latest is status


@pytest.mark.asyncio
async def test_transition_is_logged(health_service, caplog):
    runner = HealthCheckRunner(health_service)
    await runner.run_once()

    health_service.get_system_status.return_value = _status(SystemState.DEGRADED)
    with caplog.at_level("WARNING"):
        await runner.run_once()

    assert "ONLINE -> DEGRADED" in caplog.text
    assert runner.latest.status == SystemState.DEGRADED


@pytest.mark.asyncio
async def test_start_and_stop(health_service):
    runner = HealthCheckRunner(health_service, interval_seconds=0.01)

    await runner.start()
    assert runner.running is True
    await asyncio.sleep(0.05)
    await runner.stop()

    assert runner.running is False
    assert health_service.get_system_status.await_count >= 2


@pytest.mark.asyncio
async def test_loop_survives_errors(health_service):
    health_service.get_system_status.side_effect = [RuntimeError("boom"), _status(SystemState.ONLINE)]
    runner = HealthCheckRunner(health_service, interval_seconds=0.01)

    await runner.start()
    await asyncio.sleep(0.05)
    await runner.stop()

    assert runner.latest is not None
    assert runner.latest.status == SystemState.ONLINE


@pytest.mark.asyncio
async def test_double_start_is_ignored(health_service):
    runner = HealthCheckRunner(health_service, interval_seconds=60)

    await runner.start()
    await runner.start()
    assert len(runner._tasks) == 1
    await runner.stop()
