from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from offgrid.electrical import defaults


class Settings(BaseSettings):
    app_name: str = "Off-Grid Designer"
    debug: bool = True
    env: str = "development"
    log_level: str = "INFO"

    # Server
    backend_host: str = "0.0.0.0"
    backend_port: int = 8000
    cors_origins: list[str] = Field(
        default_factory=lambda: [
            "http://localhost:5173",
            "http://localhost:5000",
            "http://localhost:3000",
        ]
    )

    # Engine defaults applied by the routers
    default_system_voltage: float = defaults.DEFAULT_SYSTEM_VOLTAGE
    max_voltage_drop_percent: float = defaults.DEFAULT_MAX_VOLTAGE_DROP_PERCENT
    ambient_temperature_c: float = defaults.DEFAULT_TEMPERATURE_C

    # Iterative generation
    min_quality_score: float = 70.0
    max_iterations: int = 5

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache()
def get_settings() -> Settings:
    return Settings()
