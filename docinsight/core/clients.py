"""Process-wide external clients, constructed once at startup."""

from dataclasses import dataclass
from typing import Optional

from docinsight.core.config import Settings
from docinsight.core.exceptions import ConfigurationError
from docinsight.core.llm_client import OpenAIChatClient
from docinsight.services.storage_service import StorageService
from docinsight.utils.logging import get_logger

LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class ServiceClients:
    storage: StorageService
    chat: OpenAIChatClient


_clients: Optional[ServiceClients] = None


def init_clients(settings: Settings) -> ServiceClients:
    """Build the storage and model clients from settings.

    Calling it again returns the clients built by the first call.

    Raises:
        ConfigurationError: If a required credential is missing
    """
    global _clients
    if _clients is not None:
        return _clients

    if not settings.supabase.url or not settings.supabase.service_role_key:
        raise ConfigurationError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set")
    if not settings.openai.api_key:
        raise ConfigurationError("OPENAI_API_KEY must be set")

    _clients = ServiceClients(
        storage=StorageService(
            url=settings.supabase.url,
            service_role_key=settings.supabase.service_role_key,
            bucket=settings.supabase.storage_bucket,
            timeout=settings.supabase.http_timeout,
        ),
        chat=OpenAIChatClient(
            api_key=settings.openai.api_key,
            api_url=settings.openai.api_url,
            timeout=settings.openai.http_timeout,
            max_retries=settings.openai.max_retries,
            retry_base_delay_ms=settings.openai.retry_base_delay_ms,
        ),
    )
    LOGGER.info("External clients initialized")
    return _clients


def get_clients() -> ServiceClients:
    if _clients is None:
        raise ConfigurationError("Clients accessed before init_clients() was called")
    return _clients


def reset_clients() -> None:
    """Forget the initialized clients. Used by tests."""
    global _clients
    _clients = None
