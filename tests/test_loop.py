import time
from unittest.mock import Mock

import pytest

from scenekit.core.housekeeping import RunReport
from scenekit.core.loop import (HousekeepingLoop, run_every_minute, run_if,
                                seconds_until_next_minute,
                                wait_until_next_minute)

from .conftest import T0


class StopScene(Exception):
    pass


class TestRunIf:

    def test_false_condition_does_nothing(self, host):
        action = Mock()
        assert run_if(False, action, 30, host) is False
        action.assert_not_called()
        assert host.slept == []

    def test_runs_callable_and_sleeps(self, host):
        action = Mock()
        assert run_if(True, action, 30, host) is True
        action.assert_called_once_with()
        assert host.slept == [30]

    def test_starts_enabled_scenes_only(self, host):
        host.scenes = {1: True, 2: False, 3: True}
        run_if(True, [1, "2", 3], host=host)
        assert host.started_scenes == [1, 3]
        assert host.slept == []

    def test_scene_ids_need_a_host(self):
        with pytest.raises(ValueError):
            run_if(True, [1])


def test_seconds_until_next_minute():
    assert seconds_until_next_minute(120) == 60
    assert seconds_until_next_minute(125) == 55
    assert seconds_until_next_minute(179.9) == 1


def test_wait_until_next_minute(host):
    host.clock = T0 + 25
    wait_until_next_minute(host)
    assert host.slept == [15]
    assert host.clock % 60 == 0


def test_run_every_minute_aligns_to_minute(host):
    calls = []

    def scene():
        calls.append(host.now())
        if len(calls) == 3:
            raise StopScene()

    with pytest.raises(StopScene):
        run_every_minute(scene, host)
    assert calls == [T0, T0 + 40, T0 + 100]


class TestHousekeepingLoop:

    def test_run_once_returns_report(self, host, housekeeper):
        housekeeper.register(10, 0, "turnOn")
        loop = HousekeepingLoop(housekeeper)
        report = loop.run_once()
        assert report.executed == ["10"]
        assert loop.last_report is report
        assert loop.passes == 1

    def test_run_once_survives_errors(self):
        keeper = Mock()
        keeper.run_due_tasks.side_effect = RuntimeError("boom")
        loop = HousekeepingLoop(keeper)
        assert loop.run_once() is None
        assert loop.passes == 1

    def test_poll_interval_is_at_least_one_second(self, housekeeper):
        assert HousekeepingLoop(housekeeper, 0).poll_interval_seconds == 1

    def test_start_and_stop(self):
        keeper = Mock()
        keeper.run_due_tasks.return_value = RunReport()
        loop = HousekeepingLoop(keeper, 3600)
        loop.start()
        try:
            for _ in range(200):
                if loop.passes:
                    break
                time.sleep(0.01)
            assert loop.running
            assert loop.passes >= 1
        finally:
            loop.stop()
        assert not loop.running

    def test_wake_triggers_another_pass(self):
        keeper = Mock()
        keeper.run_due_tasks.return_value = RunReport()
        loop = HousekeepingLoop(keeper, 3600)
        loop.start()
        try:
            for _ in range(200):
                if loop.passes:
                    break
                time.sleep(0.01)
            loop.wake()
            for _ in range(200):
                if loop.passes >= 2:
                    break
                time.sleep(0.01)
            assert loop.passes >= 2
        finally:
            loop.stop()
