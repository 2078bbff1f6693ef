from pydantic_settings import BaseSettings

from edusearch.schemas.search import ContentType


class Settings(BaseSettings):
    # Remote search endpoint (n8n webhook) that ranks course content
    search_endpoint_url: str = "https://pixarron.app.n8n.cloud/webhook/d87b3f36-9d36-4e1a-bb86-4fabdfd2086e"
    # Overall deadline for one round trip, connect and read included
    request_timeout_seconds: float = 15.0
    # Older webhooks only understand "textoBusqueda"
    send_content_type: bool = True
    default_content_type: ContentType = "resource"
    high_relevance_threshold: int = 60
    mid_relevance_threshold: int = 45
    session_idle_seconds: int = 1800  # 30 minutes
    cors_origins: list[str] = [
        "http://127.0.0.1:3000",
        "http://localhost:3000",
    ]
    log_level: str = "INFO"
    api_prefix: str = "/api/v1"
    host: str = "127.0.0.1"
    port: int = 8000

    model_config = {"env_prefix": "EDUSEARCH_"}


settings = Settings()
