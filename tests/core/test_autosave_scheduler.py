"""AutosaveScheduler 테스트"""

from unittest.mock import MagicMock

import pytest

from src.core.autosave import AutosaveScheduler
from src.core.errors import PersistenceError


class TestAutosaveScheduler:
    def test_saves_when_interval_reached(self):
        save = MagicMock()
        scheduler = AutosaveScheduler(30.0, save)

        assert scheduler.tick(29.0) is False
        assert scheduler.due_in == pytest.approx(1.0)
        assert scheduler.tick(1.0) is True
        save.assert_called_once()
        assert scheduler.save_count == 1
        assert scheduler.due_in == pytest.approx(30.0)

    def test_disabled(self):
        save = MagicMock()
        scheduler = AutosaveScheduler(5.0, save)
        scheduler.enabled = False
        assert scheduler.tick(10.0) is False
        save.assert_not_called()

    def test_reset_restarts_countdown(self):
        save = MagicMock()
        scheduler = AutosaveScheduler(10.0, save)
        scheduler.tick(9.0)
        scheduler.reset()
        scheduler.tick(9.0)
        save.assert_not_called()

    def test_failure_is_logged_not_raised(self, caplog):
        save = MagicMock(side_effect=PersistenceError("disk full"))
        scheduler = AutosaveScheduler(1.0, save)

        assert scheduler.tick(1.0) is True
        assert scheduler.failure_count == 1
        assert scheduler.save_count == 0
        assert "Autosave failed" in caplog.text

    def test_ignores_non_positive_dt(self):
        save = MagicMock()
        scheduler = AutosaveScheduler(1.0, save)
        assert scheduler.tick(0) is False
        assert scheduler.tick(-5) is False

    def test_invalid_interval(self):
        with pytest.raises(ValueError):
            AutosaveScheduler(0, MagicMock())
