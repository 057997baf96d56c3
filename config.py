"""Proofchain configuration — loaded from environment / .env file."""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # --- LLM provider --------------------------------------------------
    llm_provider: str = "openai"  # "openai" | "azure" | "local"

    # OpenAI
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"

    # Azure OpenAI
    azure_openai_endpoint: str = ""
    azure_openai_api_key: str = ""
    azure_openai_deployment: str = ""

    # Local / Ollama
    local_llm_base_url: str = "http://localhost:11434/v1"
    local_llm_model: str = "llama3"

    llm_timeout_seconds: float = 60.0
    llm_max_attempts: int = 1  # 1 = single shot, no retry

    # --- Server ---------------------------------------------------------
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "info"

    internal_token: str = ""  # shared secret expected in X-Internal-Token
    allowed_origins: str = "*"  # comma-separated origins

    # --- Flows ----------------------------------------------------------
    flow_temperature: float = 0.2
    translation_target_language: str = "English"

    # --- Voice input ----------------------------------------------------
    default_speech_language: str = "en-US"

    # --- Documents ------------------------------------------------------
    document_hash_algorithm: str = "sha256"
    document_verification_delay_seconds: float = 0.0
    document_auto_close_seconds: float = 2.0
    qr_code_url_template: str = "https://api.qrserver.com/v1/create-qr-code/?size=128x128&data={hash}"
    max_upload_bytes: int = 10 * 1024 * 1024


settings = Settings()
