"""
Tests for engine configuration
"""

from unittest.mock import patch

from clinic_scheduling import config


class TestConfig:
    """Test defaults and the Redis client factory"""

    def test_defaults(self):
        assert config.DEFAULT_SLOT_MINUTES == 30
        assert config.MAX_SESSIONS_PER_SERVICE == 50
        assert (config.MIN_SESSION_DURATION, config.MAX_SESSION_DURATION) == (5, 480)
        assert config.MIN_DOCTOR_NOTES_LENGTH == 10

    def test_get_redis_client(self):
        with patch.object(config.Redis, 'from_url') as from_url:
            client = config.get_redis_client()

        assert client is from_url.return_value
        args, kwargs = from_url.call_args
        assert args[0] == config.REDIS_URL
        assert kwargs['decode_responses'] is True
