import os

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Configuration class for environment variables and service settings.
    """

    # Service settings
    service_name: str = os.getenv("SERVICE_NAME", "load_test_service")
    service_version: str = os.getenv("SERVICE_VERSION", "1.0.0")
    environment: str = os.getenv("ENVIRONMENT", "development")
    debug: bool = os.getenv("DEBUG", "True").lower() == "true"

    # Logging settings
    log_level: str = os.getenv("LOG_LEVEL", "DEBUG")
    syslog_host: str = os.getenv("SYSLOG_HOST", "172.17.0.1")
    syslog_port: int = int(os.getenv("SYSLOG_PORT", "5141"))
    json_logs: bool = os.getenv("JSON_LOGS", "True").lower() == "true"
    enable_syslog: bool = os.getenv("ENABLE_SYSLOG", "False").lower() == "true"

    # Load test engine settings
    load_test_max_total_requests: int = int(os.getenv("LOAD_TEST_MAX_TOTAL_REQUESTS", "500"))
    load_test_max_concurrent_requests: int = int(
        os.getenv("LOAD_TEST_MAX_CONCURRENT_REQUESTS", "25")
    )
    load_test_default_total_requests: int = int(
        os.getenv("LOAD_TEST_DEFAULT_TOTAL_REQUESTS", "100")
    )
    load_test_default_concurrent_requests: int = int(
        os.getenv("LOAD_TEST_DEFAULT_CONCURRENT_REQUESTS", "10")
    )
    load_test_request_timeout: float = float(os.getenv("LOAD_TEST_REQUEST_TIMEOUT", "30.0"))
    load_test_user_agent: str = os.getenv("LOAD_TEST_USER_AGENT", "LoadTester/1.0")
    load_test_max_errors: int = int(os.getenv("LOAD_TEST_MAX_ERRORS", "20"))

    # CORS settings
    cors_allow_origins: str = os.getenv("CORS_ALLOW_ORIGINS", "*")
    cors_allow_headers: str = os.getenv(
        "CORS_ALLOW_HEADERS", "authorization, x-client-info, apikey, content-type"
    )

    # Rate limiting settings
    rate_limit_enabled: bool = os.getenv("RATE_LIMIT_ENABLED", "True").lower() == "true"
    rate_limit_load_tests: str = os.getenv("RATE_LIMIT_LOAD_TESTS", "30/hour")

    # Tracing settings
    tracing_enabled: bool = os.getenv("TRACING_ENABLED", "False").lower() == "true"
    tracing_exporter: str = os.getenv("TRACING_EXPORTER", "console")
    otlp_endpoint: str = os.getenv("OTLP_ENDPOINT", "http://localhost:4318/v1/traces")

    @property
    def cors_origins(self) -> list[str]:
        """Allowed CORS origins as a list."""
        return [origin.strip() for origin in self.cors_allow_origins.split(",") if origin.strip()]

    @property
    def cors_header_names(self) -> list[str]:
        """Allowed CORS request headers as a list."""
        return [name.strip() for name in self.cors_allow_headers.split(",") if name.strip()]

    @property
    def cors_headers(self) -> dict[str, str]:
        """
        Returns the CORS headers sent with load-test responses and preflights.
        """
        return {
            "Access-Control-Allow-Origin": ", ".join(self.cors_origins),
            "Access-Control-Allow-Headers": ", ".join(self.cors_header_names),
        }

    # Environment-specific logging configuration
    @property
    def logging_config(self) -> dict:
        """
        Returns logging configuration based on environment.
        """
        base_config = {
            "app_name": self.service_name,
            "log_level": self.log_level,
            "syslog_host": self.syslog_host if self.enable_syslog else None,
            "syslog_port": self.syslog_port if self.enable_syslog else None,
            "json_logs": self.json_logs,
        }

        if self.environment == "development":
            base_config.update({"json_logs": False, "log_level": "DEBUG" if self.debug else "INFO"})

        return base_config

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
