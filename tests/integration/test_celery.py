"""Integration tests for the Celery configuration."""

import pytest

pytestmark = pytest.mark.integration


class TestCeleryConfig:
    """Verifies that Celery loads through the Django settings."""

    def test_celery_app_is_importable(self):
        from config.celery import app

        assert app.main == "storefront"

    def test_celery_app_exported_from_init(self):
        from config import celery_app

        assert celery_app.main == "storefront"

    def test_test_suite_uses_in_memory_broker(self, settings):
        assert settings.CELERY_BROKER_URL == "memory://"
        assert settings.CELERY_TASK_ALWAYS_EAGER is True

    def test_celery_serializer_is_json(self, settings):
        assert settings.CELERY_TASK_SERIALIZER == "json"
        assert settings.CELERY_RESULT_SERIALIZER == "json"
        assert settings.CELERY_ACCEPT_CONTENT == ["json"]

    def test_celery_timezone_matches_django(self, settings):
        assert settings.CELERY_TIMEZONE == settings.TIME_ZONE

    def test_relay_is_scheduled_on_beat(self, settings):
        entry = settings.CELERY_BEAT_SCHEDULE["relay-pending-confirmations"]
        assert entry["task"] == "notifications.relay_pending_confirmations"


class TestTaskRegistration:
    def test_notification_tasks_are_registered(self):
        from config.celery import app

        app.loader.import_default_modules()

        assert "notifications.send_order_confirmation" in app.tasks
        assert "notifications.relay_pending_confirmations" in app.tasks

    def test_relay_runs_eagerly_with_nothing_to_do(self):
        from modules.notifications.tasks import relay_pending_confirmations

        result = relay_pending_confirmations.delay()

        assert result.successful()
        assert result.result == 0
