"""Tests for service settings."""

from app.core.config import Settings


def test_load_test_limits_defaults():
    settings = Settings()

    assert settings.load_test_max_total_requests == 500
    assert settings.load_test_max_concurrent_requests == 25
    assert settings.load_test_default_total_requests == 100
    assert settings.load_test_default_concurrent_requests == 10
    assert settings.load_test_max_errors == 20
    assert settings.load_test_user_agent == "LoadTester/1.0"


def test_cors_headers():
    settings = Settings(
        cors_allow_origins="*",
        cors_allow_headers="authorization, x-client-info,apikey , content-type",
    )

    assert settings.cors_origins == ["*"]
    assert settings.cors_header_names == ["authorization", "x-client-info", "apikey", "content-type"]
    assert settings.cors_headers == {
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    }


def test_logging_config_development():
    settings = Settings(environment="development", debug=False, json_logs=True)

    config = settings.logging_config

    assert config["json_logs"] is False
    assert config["log_level"] == "INFO"
    assert config["syslog_host"] is None


def test_logging_config_production_with_syslog():
    settings = Settings(
        environment="production",
        log_level="WARNING",
        json_logs=True,
        enable_syslog=True,
        syslog_host="logs.internal",
        syslog_port=514,
    )

    config = settings.logging_config

    assert config["json_logs"] is True
    assert config["log_level"] == "WARNING"
    assert config["syslog_host"] == "logs.internal"
    assert config["syslog_port"] == 514
