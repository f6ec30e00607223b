"""Tests for the notification cooldown policy and action routing."""

from datetime import timedelta

import pytest

from conftest import make_target
from pagewatch.notification import (
    NotificationActions,
    NotificationPolicy,
    NotificationSource,
)


class TestNotificationPolicy:
    """Test cooldown decisions."""

    @pytest.fixture
    def policy(self):
        return NotificationPolicy(
            realtime_cooldown_seconds=60, scheduled_cooldown_seconds=60
        )

    def test_never_notified_allows(self, policy, base_time):
        assert policy.should_notify(make_target(), base_time)

    def test_realtime_within_cooldown_suppressed(self, policy, base_time):
        target = make_target(last_notified_at=base_time)
        assert not policy.should_notify(
            target, base_time + timedelta(seconds=5), NotificationSource.REALTIME
        )

    def test_cooldown_boundary_is_exclusive(self, policy, base_time):
        target = make_target(last_notified_at=base_time)
        assert not policy.should_notify(
            target, base_time + timedelta(seconds=60), NotificationSource.REALTIME
        )
        assert policy.should_notify(
            target, base_time + timedelta(seconds=61), NotificationSource.REALTIME
        )

    def test_sources_use_their_own_cooldown(self, base_time):
        policy = NotificationPolicy(
            realtime_cooldown_seconds=60, scheduled_cooldown_seconds=0
        )
        target = make_target(last_notified_at=base_time)
        later = base_time + timedelta(seconds=5)

        assert policy.should_notify(target, later, NotificationSource.SCHEDULED)
        assert not policy.should_notify(target, later, NotificationSource.REALTIME)


class TestNotificationActions:
    """Test View Site / Dismiss routing."""

    def test_open_target_returns_url_once(self):
        actions = NotificationActions()
        actions.remember("n1", "https://example.com/", "preview")

        assert actions.lookup("n1").preview == "preview"
        assert actions.open_target("n1") == "https://example.com/"
        assert actions.open_target("n1") is None

    def test_dismiss_clears_record(self):
        actions = NotificationActions()
        actions.remember("n1", "https://example.com/")

        assert actions.dismiss("n1")
        assert not actions.dismiss("n1")
        assert len(actions) == 0
