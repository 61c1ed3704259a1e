"""Configuration loading and validation for the web i18n tool."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import urlsplit

import yaml

DEFAULT_CONFIG_PATH = "config.yaml"

DEFAULT_TARGET_LANGUAGES = ["zh-CN", "ja-JP", "ko-KR", "fr-FR", "de-DE", "es-ES"]

_COMPLETIONS_SUFFIX = "/chat/completions"
_DEFAULT_API_PREFIX = "/v1"


class MissingCredentialError(ValueError):
    """Raised when a translation is attempted without an API key."""


@dataclass
class LLMConfig:
    """Chat-completion API configuration."""

    base_url: str = "https://api.openai.com/v1"
    api_key: str = ""
    model: str = "gpt-3.5-turbo"
    timeout: float = 60.0


@dataclass
class TranslationConfig:
    """Translation phase configuration."""

    target_languages: list[str] = field(
        default_factory=lambda: list(DEFAULT_TARGET_LANGUAGES)
    )
    batch_size: int = 10
    delay_ms: int = 1200
    base_locale: str = "en-US"


@dataclass
class ExtractionConfig:
    """Extraction phase configuration."""

    catalog_glob: str = "**/locales/en-US/*.json"
    component_glob: str = "**/*.vue"
    components_catalog: str = "src/locales/en-US/components.json"
    exclude_dirs: list[str] = field(
        default_factory=lambda: ["node_modules", "dist", ".git"]
    )


@dataclass
class AppConfig:
    """Top-level application configuration."""

    llm: LLMConfig = field(default_factory=LLMConfig)
    translation: TranslationConfig = field(default_factory=TranslationConfig)
    extraction: ExtractionConfig = field(default_factory=ExtractionConfig)


def parse_languages(value: str) -> list[str]:
    """Split a comma-separated language list, dropping blank entries."""
    return [lang.strip() for lang in value.split(",") if lang.strip()]


def normalize_base_url(url: str) -> str:
    """Turn a configured API URL into a base URL for the OpenAI client.

    The client appends ``/chat/completions`` itself, so a full endpoint URL
    is trimmed back to its base. Any other URL whose path has no ``v1``
    segment gets the default ``/v1`` API prefix.

    Args:
        url: URL as configured by the user.

    Returns:
        Base URL without a trailing slash.
    """
    url = url.strip().rstrip("/")
    if url.endswith(_COMPLETIONS_SUFFIX):
        return url[: -len(_COMPLETIONS_SUFFIX)].rstrip("/")

    if "v1" not in urlsplit(url).path.split("/"):
        return url + _DEFAULT_API_PREFIX
    return url


def load_config(config_path: str | None = None) -> AppConfig:
    """Load configuration from an optional YAML file and the environment.

    Environment variables override the file:
    TRANSLATION_API_KEY (or LLM_API_KEY), TRANSLATION_API_URL,
    TRANSLATION_MODEL and TARGET_LANGUAGES.

    Args:
        config_path: Path to the YAML configuration file. When omitted,
            ``config.yaml`` is read only if it exists.

    Returns:
        Validated AppConfig instance.

    Raises:
        FileNotFoundError: If an explicitly given config file does not exist.
        ValueError: If configuration values are invalid.
    """
    raw: dict = {}
    if config_path is not None:
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
    else:
        path = Path(DEFAULT_CONFIG_PATH)

    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}

    # Parse LLM config
    llm_raw = raw.get("llm", {}) or {}
    llm = LLMConfig(
        base_url=llm_raw.get("base_url", LLMConfig.base_url),
        api_key=llm_raw.get("api_key", LLMConfig.api_key) or "",
        model=llm_raw.get("model", LLMConfig.model),
        timeout=float(llm_raw.get("timeout", LLMConfig.timeout)),
    )

    env_api_key = os.environ.get("TRANSLATION_API_KEY") or os.environ.get("LLM_API_KEY")
    if env_api_key:
        llm.api_key = env_api_key

    env_api_url = os.environ.get("TRANSLATION_API_URL")
    if env_api_url:
        llm.base_url = env_api_url
    llm.base_url = normalize_base_url(llm.base_url)

    env_model = os.environ.get("TRANSLATION_MODEL")
    if env_model:
        llm.model = env_model

    # Parse translation config
    trans_raw = raw.get("translation", {}) or {}
    languages = trans_raw.get("target_languages", DEFAULT_TARGET_LANGUAGES)
    if isinstance(languages, str):
        languages = parse_languages(languages)

    translation = TranslationConfig(
        target_languages=list(languages),
        batch_size=trans_raw.get("batch_size", TranslationConfig.batch_size),
        delay_ms=trans_raw.get("delay_ms", TranslationConfig.delay_ms),
        base_locale=trans_raw.get("base_locale", TranslationConfig.base_locale),
    )

    env_languages = os.environ.get("TARGET_LANGUAGES")
    if env_languages:
        translation.target_languages = parse_languages(env_languages)

    # Parse extraction config
    extract_raw = raw.get("extraction", {}) or {}
    defaults = ExtractionConfig()
    extraction = ExtractionConfig(
        catalog_glob=extract_raw.get("catalog_glob", defaults.catalog_glob),
        component_glob=extract_raw.get("component_glob", defaults.component_glob),
        components_catalog=extract_raw.get(
            "components_catalog", defaults.components_catalog
        ),
        exclude_dirs=list(extract_raw.get("exclude_dirs", defaults.exclude_dirs)),
    )

    config = AppConfig(llm=llm, translation=translation, extraction=extraction)
    _validate_config(config)
    return config


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values shared by both phases.

    Args:
        config: The configuration to validate.

    Raises:
        ValueError: If validation fails.
    """
    if not config.llm.base_url:
        raise ValueError("LLM base_url must not be empty.")

    if not config.llm.model:
        raise ValueError("LLM model must not be empty.")

    if not config.translation.target_languages:
        raise ValueError("target_languages must contain at least one language.")

    if not config.translation.base_locale:
        raise ValueError("base_locale must not be empty.")

    if config.translation.batch_size < 1:
        raise ValueError("batch_size must be at least 1.")

    if config.translation.delay_ms < 0:
        raise ValueError("delay_ms must not be negative.")


def require_api_key(config: AppConfig) -> None:
    """Ensure an API key is present before the translation phase starts.

    Raises:
        MissingCredentialError: If no API key is configured.
    """
    if not config.llm.api_key or config.llm.api_key == "sk-...":
        raise MissingCredentialError(
            "Translation API key is not configured. "
            "Set it in config.yaml or via the TRANSLATION_API_KEY environment variable."
        )
