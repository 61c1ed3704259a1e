"""Catalog artifacts: the extraction report, translation report and message files."""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

FileEntries = dict[str, str]
TranslationCatalog = dict[str, FileEntries]
LocalizedResults = dict[str, TranslationCatalog]

SAMPLE_KEY_COUNT = 5


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def count_keys(catalog: TranslationCatalog) -> int:
    """Total number of keys across all files of a catalog."""
    return sum(len(entries) for entries in catalog.values())


def build_extraction_report(catalog: TranslationCatalog, source_path: str) -> dict[str, Any]:
    """Wrap a catalog in the intermediate artifact written by the extract phase.

    Args:
        catalog: Extracted catalog.
        source_path: Source tree the catalog was built from.

    Returns:
        Report with per-file summary, the full catalog under ``details``
        and totals.
    """
    summary = {
        file: {
            "keyCount": len(entries),
            "sampleKeys": list(entries.keys())[:SAMPLE_KEY_COUNT],
        }
        for file, entries in catalog.items()
    }
    return {
        "timestamp": _timestamp(),
        "sourcePath": str(source_path),
        "summary": summary,
        "details": catalog,
        "totalKeys": count_keys(catalog),
        "fileCount": len(catalog),
    }


def _validate_catalog(data: Any) -> TranslationCatalog:
    if not isinstance(data, dict):
        raise ValueError(f"Catalog is not a JSON object: {type(data).__name__}")

    for file, entries in data.items():
        if not isinstance(entries, dict):
            raise ValueError(f"Entries for {file} are not a JSON object")
        for key, text in entries.items():
            if not isinstance(text, str):
                raise ValueError(f"Value of {file}:{key} is not a string")
    return data


def load_catalog(path: str | Path) -> TranslationCatalog:
    """Load a catalog from an extraction report or a bare catalog file.

    Args:
        path: Path to the JSON artifact.

    Returns:
        The catalog (the report's ``details`` when present).

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is not valid JSON or not catalog-shaped.
    """
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"Catalog file not found: {path}")

    with open(file_path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Catalog file {path} is not valid JSON: {e}") from e

    if isinstance(data, dict) and "details" in data:
        data = data["details"]
    return _validate_catalog(data)


def build_translation_report(
    results: LocalizedResults, catalog: TranslationCatalog
) -> dict[str, Any]:
    """Summarize a translation run.

    Args:
        results: Per-language translated catalogs.
        catalog: Source catalog the run started from.

    Returns:
        Report with languages, source totals and per-language statistics.
    """
    language_stats = {
        language: {
            "filesTranslated": len(files),
            "totalTranslations": count_keys(files),
        }
        for language, files in results.items()
    }
    return {
        "timestamp": _timestamp(),
        "languages": list(results.keys()),
        "totalKeys": count_keys(catalog),
        "filesProcessed": len(catalog),
        "languageStats": language_stats,
    }


def to_message_catalog(entries: FileEntries) -> dict[str, dict[str, str]]:
    """Wrap flat entries in the ``{key: {"message": text}}`` file format."""
    return {key: {"message": text} for key, text in entries.items()}


def save_json(path: str | Path, data: Any) -> None:
    """Write JSON with 2-space indentation, raw UTF-8 and a trailing newline.

    Args:
        path: File path to write to.
        data: JSON-serializable data.
    """
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
        f.write("\n")
