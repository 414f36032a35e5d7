"""
Application settings - built once at process start and passed into each service
"""
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

from dotenv import load_dotenv

DEFAULT_DISTRIBUTOR_FIELDS = (
    "Package / Case",
    "Supplier Device Package",
    "Unit Price",
    "Product Status",
)

# Google Custom Search returns at most 10 items per page
SEARCH_PAGE_SIZE = 10


def _get_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    value = env.get(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _get_int(env: Mapping[str, str], name: str, default: int) -> int:
    value = env.get(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float(env: Mapping[str, str], name: str, default: float) -> float:
    value = env.get(name)
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _get_list(env: Mapping[str, str], name: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    value = env.get(name)
    if not value:
        return default
    items = tuple(item.strip() for item in value.split(",") if item.strip())
    return items or default


def _get_str(env: Mapping[str, str], name: str) -> Optional[str]:
    value = env.get(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass(frozen=True)
class Settings:
    """Immutable configuration for one process."""

    # Generation
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o"
    openai_web_search: bool = False
    generation_provider: str = "openai"
    azure_endpoint: Optional[str] = None
    azure_agent: Optional[str] = None
    alternatives_max_tokens: int = 4000
    compare_max_tokens: int = 2000
    compare_temperature: float = 0.1
    generation_timeout: float = 120.0

    # Web search
    google_api_key: Optional[str] = None
    google_cx: Optional[str] = None
    search_max_results: int = 5
    distributor_domains: Tuple[str, ...] = ("digikey.com",)

    # Parts database
    nexar_client_id: Optional[str] = None
    nexar_client_secret: Optional[str] = None
    nexar_api_key: Optional[str] = None

    # Enrichment policy
    enrichment_mode: str = "first"
    datasheet_enrichment: bool = True
    datasheet_max_chars: int = 4000
    distributor_fields: Tuple[str, ...] = field(default=DEFAULT_DISTRIBUTOR_FIELDS)

    # Network
    request_timeout: float = 10.0
    user_agent: str = "Mozilla/5.0 (compatible; PartAlternativeFinder/1.0)"

    prompt_policy: str = "standard"
    answer_log_dir: Optional[str] = None
    log_level: str = "INFO"

    def __post_init__(self):
        clamped = max(1, min(self.search_max_results, SEARCH_PAGE_SIZE))
        object.__setattr__(self, "search_max_results", clamped)
        if self.enrichment_mode not in ("first", "all"):
            object.__setattr__(self, "enrichment_mode", "first")
        object.__setattr__(self, "generation_provider", self.generation_provider.lower())

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            env: Mapping to read from. Defaults to os.environ after loading .env

        Returns:
            Settings instance
        """
        if env is None:
            load_dotenv()
            env = os.environ

        return cls(
            openai_api_key=_get_str(env, "OPENAI_API_KEY"),
            openai_model=_get_str(env, "OPENAI_MODEL") or "gpt-4o",
            openai_web_search=_get_bool(env, "OPENAI_WEB_SEARCH", False),
            generation_provider=_get_str(env, "GENERATION_PROVIDER") or "openai",
            azure_endpoint=_get_str(env, "AZURE_AI_API_ENDPOINT"),
            azure_agent=_get_str(env, "AZURE_AI_AGENT"),
            alternatives_max_tokens=_get_int(env, "ALTERNATIVES_MAX_TOKENS", 4000),
            compare_max_tokens=_get_int(env, "COMPARE_MAX_TOKENS", 2000),
            compare_temperature=_get_float(env, "COMPARE_TEMPERATURE", 0.1),
            generation_timeout=_get_float(env, "GENERATION_TIMEOUT", 120.0),
            google_api_key=_get_str(env, "GOOGLE_API_KEY"),
            google_cx=_get_str(env, "GOOGLE_CX"),
            search_max_results=_get_int(env, "SEARCH_MAX_RESULTS", 5),
            distributor_domains=_get_list(env, "DISTRIBUTOR_DOMAINS", ("digikey.com",)),
            nexar_client_id=_get_str(env, "NEXAR_CLIENT_ID"),
            nexar_client_secret=_get_str(env, "NEXAR_CLIENT_SECRET"),
            nexar_api_key=_get_str(env, "NEXAR_API_KEY"),
            enrichment_mode=(_get_str(env, "ENRICHMENT_MODE") or "first").lower(),
            datasheet_enrichment=_get_bool(env, "DATASHEET_ENRICHMENT", True),
            datasheet_max_chars=_get_int(env, "DATASHEET_MAX_CHARS", 4000),
            distributor_fields=_get_list(env, "DISTRIBUTOR_FIELDS", DEFAULT_DISTRIBUTOR_FIELDS),
            request_timeout=_get_float(env, "REQUEST_TIMEOUT", 10.0),
            prompt_policy=(_get_str(env, "PROMPT_POLICY") or "standard").lower(),
            answer_log_dir=_get_str(env, "ANSWER_LOG_DIR"),
            log_level=(_get_str(env, "LOG_LEVEL") or "INFO").upper(),
        )

    @property
    def generation_configured(self) -> bool:
        if self.generation_provider == "azure":
            return bool(self.azure_endpoint and self.azure_agent)
        return bool(self.openai_api_key)

    @property
    def search_configured(self) -> bool:
        return bool(self.google_api_key and self.google_cx)

    @property
    def parts_db_configured(self) -> bool:
        return bool(self.nexar_api_key or (self.nexar_client_id and self.nexar_client_secret))
