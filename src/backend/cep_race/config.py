"""
Application configuration via environment variables.
"""
from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Race settings loaded from environment / .env file (prefix CEP_RACE_)."""

    # App
    app_name: str = "CEP Race"
    log_level: str = "INFO"

    # Race
    response_timeout_seconds: float = 1.0
    fail_fast: bool = False  # return as soon as every provider has failed

    # Providers
    apicep_url_template: str = "https://cdn.apicep.com/file/apicep/{cep}.json"
    viacep_url_template: str = "http://viacep.com.br/ws/{cep}/json"
    provider_request_timeout_seconds: float = 10.0  # bounds each HTTP call, winners and losers alike

    # Simulated latency, for trying out different race results
    apicep_delay_seconds: float = 0.0
    viacep_delay_seconds: float = 0.0

    model_config = {
        "env_prefix": "CEP_RACE_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    @field_validator("apicep_url_template", "viacep_url_template")
    @classmethod
    def _require_cep_placeholder(cls, v: str) -> str:
        if "{cep}" not in v:
            raise ValueError("URL template must contain a '{cep}' placeholder")
        return v

    @field_validator(
        "response_timeout_seconds",
        "provider_request_timeout_seconds",
        "apicep_delay_seconds",
        "viacep_delay_seconds",
    )
    @classmethod
    def _non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("durations must be >= 0")
        return v


settings = Settings()
