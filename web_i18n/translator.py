"""LLM-based translation of extracted catalogs with paced batching."""

import asyncio
import logging
import re
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Any, Awaitable, Callable

from openai import AsyncOpenAI, OpenAIError

from web_i18n.catalog import (
    LocalizedResults,
    TranslationCatalog,
    save_json,
    to_message_catalog,
)
from web_i18n.config import LLMConfig, MissingCredentialError, TranslationConfig

logger = logging.getLogger(__name__)

# Language tag to human-readable name mapping for better LLM prompts
LANGUAGE_NAMES: dict[str, str] = {
    "zh-CN": "Simplified Chinese",
    "zh-TW": "Traditional Chinese",
    "ja-JP": "Japanese",
    "ko-KR": "Korean",
    "fr-FR": "French",
    "de-DE": "German",
    "es-ES": "Spanish",
    "it-IT": "Italian",
    "pt-BR": "Brazilian Portuguese",
    "pt-PT": "European Portuguese",
    "ru-RU": "Russian",
    "nl-NL": "Dutch",
    "pl-PL": "Polish",
    "tr-TR": "Turkish",
    "uk-UA": "Ukrainian",
}

_QUOTES = "\"'"

_CONTEXT_LENGTH = 50

ProgressCallback = Callable[[int], Awaitable[None]]


def _get_language_name(tag: str) -> str:
    """Get human-readable language name from a language tag.

    Args:
        tag: BCP 47 language tag.

    Returns:
        Human-readable name, or the tag itself if not found.
    """
    return LANGUAGE_NAMES.get(tag, tag)


def _build_prompt(text: str, target_language: str) -> str:
    """Build the single user instruction for one translation request."""
    language_name = _get_language_name(target_language)
    return (
        f"Please translate the following UI text to {language_name}. "
        f"This is from a web application interface. "
        f"Keep the original formatting, any HTML tags, and any placeholders "
        f"like {{variables}}. Only return the translated text without quotes "
        f"or explanations:\n\n{text}"
    )


def _strip_quotes(text: str) -> str:
    """Remove one pair of enclosing quote characters, if present."""
    if len(text) >= 2 and text[0] in _QUOTES and text[-1] in _QUOTES:
        return text[1:-1]
    return text


def _truncate(text: str, length: int = _CONTEXT_LENGTH) -> str:
    return text if len(text) <= length else text[:length] + "..."


def _chunk_list(items: list[Any], chunk_size: int) -> list[list[Any]]:
    """Split a list into chunks of the given size.

    Args:
        items: List to split.
        chunk_size: Maximum number of items per chunk.

    Returns:
        List of chunks.
    """
    return [items[i : i + chunk_size] for i in range(0, len(items), chunk_size)]


def locale_path(relative_path: str, base_locale: str, target_language: str) -> PurePosixPath:
    """Map a base-locale catalog path onto the target language's locale directory.

    The last ``base_locale`` directory segment is replaced by the target tag.
    A path without such a segment gets the tag inserted as a directory just
    before the file name.

    Args:
        relative_path: Catalog path relative to the source root.
        base_locale: Base locale segment, e.g. ``en-US``.
        target_language: Target language tag.

    Returns:
        Relative destination path.
    """
    path = PurePosixPath(relative_path)
    parents = list(path.parent.parts)
    for index in range(len(parents) - 1, -1, -1):
        if parents[index] == base_locale:
            parents[index] = target_language
            return PurePosixPath(*parents, path.name)
    return PurePosixPath(*parents, target_language, path.name)


@dataclass
class RunContext:
    """Mutable state of one translator instance."""

    config_logged: bool = False
    requests: int = 0
    failures: int = 0


class Translator:
    """Translates catalogs one string at a time through a chat-completion API."""

    def __init__(
        self,
        llm_config: LLMConfig,
        translation_config: TranslationConfig | None = None,
        client: AsyncOpenAI | None = None,
    ):
        self.llm_config = llm_config
        self.settings = translation_config or TranslationConfig()
        self._client = client
        self.context = RunContext()

    @property
    def target_languages(self) -> list[str]:
        return self.settings.target_languages

    def _get_client(self) -> AsyncOpenAI:
        if not self.llm_config.api_key:
            raise MissingCredentialError("Translation API key is required")

        if not self.context.config_logged:
            masked = re.sub(r"/[^/]*$", "/***", self.llm_config.base_url)
            logger.info("API endpoint: %s", masked)
            logger.info("Model: %s", self.llm_config.model)
            self.context.config_logged = True

        if self._client is None:
            self._client = AsyncOpenAI(
                base_url=self.llm_config.base_url,
                api_key=self.llm_config.api_key,
                timeout=self.llm_config.timeout,
                max_retries=0,
            )
        return self._client

    async def translate_one(self, text: str, target_language: str) -> str:
        """Translate a single string.

        Args:
            text: Source text.
            target_language: Target language tag.

        Returns:
            The translation, or ``text`` unchanged if the request failed.

        Raises:
            MissingCredentialError: If no API key is configured.
        """
        client = self._get_client()
        self.context.requests += 1

        try:
            response = await client.chat.completions.create(
                model=self.llm_config.model,
                messages=[{"role": "user", "content": _build_prompt(text, target_language)}],
                temperature=0.3,
                max_tokens=500,
            )
            content = response.choices[0].message.content
        except (OpenAIError, ValueError, IndexError, AttributeError, TypeError) as e:
            self.context.failures += 1
            logger.warning(
                'Translation error for "%s" to %s: %s',
                _truncate(text),
                target_language,
                _truncate(str(e), 200),
            )
            return text

        translated = (content or "").strip()
        if not translated:
            return text
        return _strip_quotes(translated)

    async def translate_batch(self, texts: list[str], target_language: str) -> list[str]:
        """Translate texts in paced chunks, preserving input order.

        Each chunk is sent concurrently; chunks are separated by the
        configured delay.

        Args:
            texts: Source texts.
            target_language: Target language tag.

        Returns:
            Translations in the same order as ``texts``.
        """
        if texts:
            self._get_client()

        results: list[str] = []
        chunks = _chunk_list(texts, self.settings.batch_size)

        for number, chunk in enumerate(chunks, start=1):
            logger.debug("Batch %d/%d (%d items)", number, len(chunks), len(chunk))
            translated = await asyncio.gather(
                *(self.translate_one(text, target_language) for text in chunk)
            )
            for source, result in zip(chunk, translated):
                logger.debug('  "%s" -> "%s"', _truncate(source, 30), _truncate(result, 30))
            results.extend(translated)

            if number < len(chunks):
                logger.debug("Waiting %dms...", self.settings.delay_ms)
                await asyncio.sleep(self.settings.delay_ms / 1000)

        return results

    async def translate_all(
        self,
        catalog: TranslationCatalog,
        progress_callback: ProgressCallback | None = None,
    ) -> LocalizedResults:
        """Translate every file of the catalog into every target language.

        Args:
            catalog: Source catalog.
            progress_callback: Optional async callable(count) invoked after
                each file with the number of strings processed.

        Returns:
            Per-language catalogs with the same keys as the source.
        """
        results: LocalizedResults = {}
        logger.info("Starting translation to %d languages", len(self.target_languages))

        for target_language in self.target_languages:
            logger.info("Translating to %s...", target_language)
            results[target_language] = {}

            for file, entries in catalog.items():
                if not entries:
                    logger.warning("No texts to translate in %s", file)
                    continue

                keys = list(entries.keys())
                texts = [entries[key] for key in keys]
                logger.info("  %s: %d strings", file, len(texts))

                translated = await self.translate_batch(texts, target_language)
                results[target_language][file] = dict(zip(keys, translated))

                if progress_callback:
                    await progress_callback(len(texts))

        return results

    def apply_translations(
        self, results: LocalizedResults, destination_root: str | Path
    ) -> list[Path]:
        """Write per-language message catalogs under the destination tree.

        Existing files are overwritten. A failed write is logged and does not
        stop the remaining files.

        Args:
            results: Output of ``translate_all``.
            destination_root: Root of the source tree to write into.

        Returns:
            Paths of the files written.
        """
        root = Path(destination_root)
        written: list[Path] = []

        for target_language, files in results.items():
            logger.info("Writing %s catalogs...", target_language)
            for original_file, entries in files.items():
                relative = locale_path(
                    original_file, self.settings.base_locale, target_language
                )
                target = root / relative
                try:
                    target.parent.mkdir(parents=True, exist_ok=True)
                    save_json(target, to_message_catalog(entries))
                except OSError as e:
                    logger.error("Error writing %s: %s", target, e)
                    continue

                written.append(target)
                logger.info("  Created %s (%d keys)", relative, len(entries))

        return written

