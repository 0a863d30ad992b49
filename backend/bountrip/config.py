from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # LLM provider credentials (read when a model is resolved)
    openai_api_key: str = ""
    perplexity_api_key: str = ""
    groq_api_key: str = ""

    # Model used by the structured travel endpoints
    travel_model: str = "gpt-4o-2024-08-06"

    # "heuristic" or "tiktoken"
    token_estimator: str = "heuristic"

    # Outbound HTTP
    llm_timeout_seconds: float = 60.0

    # Frontend URL (for CORS)
    frontend_url: str = "http://localhost:3000"

    # Rate limits
    ai_rate_limit: str = "30/minute"
    rate_limit_enabled: bool = True

    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
