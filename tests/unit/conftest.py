"""
Unit Test Fixtures.

Fixtures for unit tests - no test here touches the real data directory.
"""

from unittest.mock import MagicMock

import pytest

from modules.sticky.core.config_schema import (
    FeaturesSchema,
    LockSchema,
    RemindersSchema,
    SecuritySchema,
)


# =============================================================================
# Settings Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_app_config() -> MagicMock:
    """
    Mock YAML application configuration.

    Usage:
        def test_with_config(mock_app_config):
            options = SessionOptions.from_app_config(mock_app_config)
    """
    config = MagicMock()
    config.reminders = RemindersSchema(
        interval_seconds=5,
        recurrence_mode="advance",
        notification_title="Heads up",
        notification_icon="icon.png",
        time_format="%H:%M",
    )
    config.features = FeaturesSchema(broadcast_enabled=False, reminders_enabled=True)
    config.security = SecuritySchema(lock=LockSchema(hash_passwords=False, bcrypt_rounds=4))
    return config
