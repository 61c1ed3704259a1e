"""Extraction of translatable strings from component templates and JSON catalogs."""

import json
import logging
import re
from pathlib import Path
from typing import Any

from web_i18n.catalog import FileEntries, TranslationCatalog
from web_i18n.classifier import classify
from web_i18n.config import ExtractionConfig

logger = logging.getLogger(__name__)

# Nesting deeper than this in a message catalog is treated as malformed.
MAX_CATALOG_DEPTH = 64

_TEMPLATE_OPEN = re.compile(r"<template[^>]*>", re.IGNORECASE)
_TEMPLATE_CLOSE = re.compile(r"</template\s*>", re.IGNORECASE)

# Order matters only for tie-breaking matches that start at the same offset.
TEMPLATE_TEXT_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"(?<![\w/])\"([^\"]{2,50})\""),
    re.compile(r"(?<![\w/])'([^']{2,50})'"),
    re.compile(r">([A-Za-z][^<>{}]{2,50}[A-Za-z])<"),
    re.compile(r"placeholder=['\"]([^'\"]{2,50})['\"]"),
    re.compile(r"title=['\"]([^'\"]{2,50})['\"]"),
    re.compile(r"alt=['\"]([^'\"]{2,50})['\"]"),
    re.compile(r"v-tooltip=['\"]([^'\"]{2,50})['\"]"),
    re.compile(r"<label[^>]*>([^<]{2,50})<"),
    re.compile(r"<[Bb]utton[^>]*>([^<]{2,50})<"),
)


class SourceNotFoundError(FileNotFoundError):
    """Raised when the source tree to scan does not exist."""


def _template_body(content: str) -> str | None:
    """Return the text between the outermost template markers, if any."""
    opening = _TEMPLATE_OPEN.search(content)
    if opening is None:
        return None

    closings = list(_TEMPLATE_CLOSE.finditer(content, opening.end()))
    if not closings:
        return None
    return content[opening.end() : closings[-1].start()]


def _find_candidates(body: str) -> list[tuple[int, int, str]]:
    """Collect stripped matches of every pattern as (offset, pattern, text).

    The same span reported by several patterns is kept once.
    """
    seen: set[tuple[int, str]] = set()
    candidates: list[tuple[int, int, str]] = []

    for index, pattern in enumerate(TEMPLATE_TEXT_PATTERNS):
        for match in pattern.finditer(body):
            raw = match.group(1)
            text = raw.strip()
            if not text:
                continue
            offset = match.start(1) + (len(raw) - len(raw.lstrip()))
            if (offset, text) in seen:
                continue
            seen.add((offset, text))
            candidates.append((offset, index, text))

    candidates.sort()
    return candidates


def extract_from_template_file(content: str, file_name: str) -> FileEntries:
    """Extract translatable strings from a templated component file.

    Keys are ``<basename>.text<N>`` with N counting up from 1 in source order,
    regardless of which pattern found the string.

    Args:
        content: Full text of the component file.
        file_name: File name or path; only the stem is used for keys.

    Returns:
        Mapping of synthesized keys to source text. Empty on any error.
    """
    base_name = Path(file_name).stem
    try:
        body = _template_body(content)
        if body is None:
            return {}

        entries: FileEntries = {}
        counter = 1
        for _offset, _pattern, text in _find_candidates(body):
            if classify(text):
                entries[f"{base_name}.text{counter}"] = text
                counter += 1
        return entries
    except Exception as e:
        logger.error("Error processing template file %s: %s", file_name, e)
        return {}


def _walk_messages(data: dict[str, Any]) -> FileEntries:
    """Collect ``message`` leaves from a nested catalog without recursion."""
    entries: FileEntries = {}
    visited: set[int] = {id(data)}
    # Leaves and nodes share one stack; children are pushed in reverse so
    # keys come out in document order.
    stack: list[tuple[str, Any, int]] = [("", data, 0)]

    while stack:
        prefix, node, depth = stack.pop()
        if isinstance(node, str):
            entries[prefix] = node
            continue

        if isinstance(node, dict):
            items = list(node.items())
        else:
            items = [(str(i), value) for i, value in enumerate(node)]

        children: list[tuple[str, Any, int]] = []
        for key, value in items:
            full_key = f"{prefix}.{key}" if prefix else str(key)
            if isinstance(value, dict) and "message" in value:
                message = value["message"]
                if isinstance(message, str) and message:
                    children.append((full_key, message, depth + 1))
                else:
                    logger.debug("Skipping non-text message at %s", full_key)
            elif isinstance(value, (dict, list)):
                if id(value) in visited:
                    logger.warning("Skipping repeated node at %s", full_key)
                elif depth + 1 > MAX_CATALOG_DEPTH:
                    logger.warning("Catalog nesting too deep at %s", full_key)
                else:
                    visited.add(id(value))
                    children.append((full_key, value, depth + 1))

        stack.extend(reversed(children))

    return entries


def extract_from_message_catalog(content: str) -> FileEntries:
    """Extract messages from a base-locale JSON catalog.

    Any object with a ``message`` field is a leaf keyed by its dotted path;
    other objects are descended into.

    Args:
        content: JSON text of the catalog.

    Returns:
        Mapping of dotted keys to message text. Empty on malformed input.
    """
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        logger.error("Malformed JSON catalog: %s", e)
        return {}

    if not isinstance(data, dict):
        logger.error("JSON catalog root is not an object: %s", type(data).__name__)
        return {}

    return _walk_messages(data)


class TranslationExtractor:
    """Scans a source tree and builds a TranslationCatalog."""

    def __init__(self, source_root: str | Path, settings: ExtractionConfig | None = None):
        self.source_root = Path(source_root)
        self.settings = settings or ExtractionConfig()

    def _is_excluded(self, path: Path) -> bool:
        relative = path.relative_to(self.source_root)
        return any(part in self.settings.exclude_dirs for part in relative.parts[:-1])

    def _glob(self, pattern: str) -> list[Path]:
        return sorted(
            p
            for p in self.source_root.glob(pattern)
            if p.is_file() and not self._is_excluded(p)
        )

    def _relative(self, path: Path) -> str:
        return path.relative_to(self.source_root).as_posix()

    def describe_source_tree(self) -> None:
        """Log the top-level layout of the source tree."""
        logger.debug("Source directory contents of %s:", self.source_root)
        try:
            for item in sorted(self.source_root.iterdir()):
                kind = "dir " if item.is_dir() else "file"
                logger.debug("  [%s] %s", kind, item.name)
        except OSError as e:
            logger.error("Error reading source directory: %s", e)

    def _read(self, path: Path) -> str | None:
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Cannot read %s: %s", self._relative(path), e)
            return None

    def scan_message_catalogs(self) -> TranslationCatalog:
        """Extract entries from every base-locale JSON catalog."""
        catalog: TranslationCatalog = {}
        files = self._glob(self.settings.catalog_glob)
        logger.info("Found %d existing translation files", len(files))

        for path in files:
            relative = self._relative(path)
            content = self._read(path)
            if content is None:
                continue

            entries = extract_from_message_catalog(content)
            if not entries:
                logger.debug("No messages in %s", relative)
                continue
            catalog[relative] = entries
            logger.debug("  %s: %d keys", relative, len(entries))
        return catalog

    def scan_components(self) -> FileEntries:
        """Extract entries from every component file into one aggregate map."""
        aggregate: FileEntries = {}
        files = self._glob(self.settings.component_glob)
        logger.info("Found %d component files", len(files))

        for path in files:
            content = self._read(path)
            if content is None:
                continue

            entries = extract_from_template_file(content, path.name)
            if not entries:
                continue

            for key, text in entries.items():
                if key in aggregate:
                    logger.warning(
                        "Duplicate key %s from %s overrides an earlier component",
                        key,
                        self._relative(path),
                    )
                aggregate[key] = text
            logger.debug("  %s: %d strings", self._relative(path), len(entries))
        return aggregate

    def scan(self) -> TranslationCatalog:
        """Walk the source tree and build the catalog.

        Returns:
            Catalog keyed by paths relative to the source root. Files without
            translatable strings are omitted.

        Raises:
            SourceNotFoundError: If the source root does not exist.
        """
        if not self.source_root.exists():
            raise SourceNotFoundError(f"Source path not found: {self.source_root}")

        logger.info("Scanning source: %s", self.source_root)
        self.describe_source_tree()

        catalog = self.scan_message_catalogs()
        components = self.scan_components()
        if components:
            catalog[self.settings.components_catalog] = components

        total = sum(len(entries) for entries in catalog.values())
        logger.info(
            "Extracted %d keys from %d catalogs (%d from components)",
            total,
            len(catalog),
            len(components),
        )
        return catalog
