"""Configuration management using Pydantic Settings"""

from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_prefix="MOTORISTA_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    database_url: str = "sqlite:///./motorista_real.db"

    # External Services
    identity_api_base: str = "http://localhost:8001"

    # Service
    service_name: str = "motorista-real"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 5.0

    # Accounts
    default_daily_goal: float = 200.0

    # Release notes
    app_version: str = "1.2.0"
    latest_version: str = "1.3.0"
    update_is_mandatory: bool = False
    release_notes: List[str] = [
        "Novo gráfico de performance financeira",
        "Sistema de comparação de veículos turbinado",
        "Relatórios semanais",
        "Correções no cálculo de amortização",
    ]


settings = Settings()
