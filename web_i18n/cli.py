"""CLI orchestration: wires config, extractor, and translator together."""

import asyncio
import logging
import time
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)
from rich.table import Table

from web_i18n.catalog import (
    TranslationCatalog,
    build_extraction_report,
    build_translation_report,
    count_keys,
    load_catalog,
    save_json,
)
from web_i18n.config import AppConfig, load_config, require_api_key
from web_i18n.extractor import TranslationExtractor
from web_i18n.translator import Translator

console = Console()

REPORT_FILE_NAME = "translation-report.json"


def setup_logging(verbose: bool = False) -> None:
    """Configure logging with rich handler for colored, readable output."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _print_extraction_table(catalog: TranslationCatalog) -> None:
    table = Table(title="Extraction Summary")
    table.add_column("File", style="cyan")
    table.add_column("Keys", style="green", justify="right")

    for file, entries in catalog.items():
        table.add_row(file, str(len(entries)))

    table.add_section()
    table.add_row("[bold]Total[/bold]", f"[bold]{count_keys(catalog)}[/bold]")

    console.print()
    console.print(table)


def _print_summary_table(report: dict, requests: int, failures: int, elapsed: float) -> None:
    """Print a summary table showing translation results per language.

    Args:
        report: Translation report as written to disk.
        requests: Number of translation requests sent.
        failures: Number of strings that fell back to the source text.
        elapsed: Total elapsed time in seconds.
    """
    table = Table(title="Translation Summary")
    table.add_column("Language", style="cyan")
    table.add_column("Files", justify="right")
    table.add_column("Translated", style="green", justify="right")

    for lang in report["languages"]:
        stats = report["languageStats"][lang]
        table.add_row(lang, str(stats["filesTranslated"]), str(stats["totalTranslations"]))

    console.print()
    console.print(table)
    console.print(f"[dim]{requests} requests sent[/dim]")
    if failures:
        console.print(
            f"[yellow]{failures} strings could not be translated and were kept as-is.[/yellow]"
        )
    console.print(f"\n[dim]Completed in {elapsed:.1f}s[/dim]")


def extract(config: AppConfig, source_path: str, output_file: str) -> dict:
    """Run the extraction phase and write the catalog artifact.

    Args:
        config: Application configuration.
        source_path: Root of the source tree to scan.
        output_file: Path of the catalog artifact to write.

    Returns:
        The extraction report.
    """
    console.print(f"[bold]Source path:[/bold] {source_path}")
    console.print(f"[bold]Output file:[/bold] {output_file}")

    extractor = TranslationExtractor(source_path, config.extraction)
    catalog = extractor.scan()
    report = build_extraction_report(catalog, source_path)
    save_json(output_file, report)

    _print_extraction_table(catalog)
    console.print(
        f"\n[green bold]Extracted {report['totalKeys']} keys in "
        f"{report['fileCount']} files to {output_file}[/green bold]"
    )
    return report


async def _translate_async(config: AppConfig, input_file: str, destination: str) -> None:
    """Async entry point for the translation phase.

    Args:
        config: Validated application configuration.
        input_file: Catalog artifact produced by the extract phase.
        destination: Source tree to write localized catalogs into.
    """
    catalog = load_catalog(input_file)
    console.print(f"[bold]Found {len(catalog)} files with translations[/bold]")

    if not catalog:
        console.print("[yellow]Catalog is empty. Nothing to translate.[/yellow]")
        return

    languages = config.translation.target_languages
    console.print(f"[bold]Target languages ({len(languages)}):[/bold] {', '.join(languages)}")

    translator = Translator(config.llm, config.translation)
    total = count_keys(catalog) * len(languages)
    start_time = time.time()

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        TimeRemainingColumn(),
        console=console,
    ) as progress:
        progress_task = progress.add_task("Translating...", total=total)

        async def on_progress(count: int) -> None:
            """Callback to advance the progress bar."""
            progress.advance(progress_task, advance=count)

        results = await translator.translate_all(catalog, progress_callback=on_progress)

    elapsed = time.time() - start_time

    written = translator.apply_translations(results, destination)
    console.print(f"\n[green bold]Wrote {len(written)} catalog files under {destination}[/green bold]")

    report = build_translation_report(results, catalog)
    report_file = Path(input_file).parent / REPORT_FILE_NAME
    save_json(report_file, report)
    console.print(f"[bold]Report:[/bold] {report_file}")

    _print_summary_table(
        report, translator.context.requests, translator.context.failures, elapsed
    )


def translate(config: AppConfig, input_file: str, destination: str) -> None:
    """Run the translation phase after checking its preconditions.

    Raises:
        MissingCredentialError: If no API key is configured.
        FileNotFoundError: If the input file or destination does not exist.
    """
    require_api_key(config)

    if not Path(input_file).exists():
        raise FileNotFoundError(
            f"Input file not found: {input_file}. Run the extract command first."
        )
    if not Path(destination).exists():
        raise FileNotFoundError(f"Destination path not found: {destination}")

    console.print(f"[bold]Input file:[/bold] {input_file}")
    console.print(f"[bold]Destination:[/bold] {destination}")
    asyncio.run(_translate_async(config, input_file, destination))


def run(command: str, paths: list[str], config_path: str | None = None, verbose: bool = False) -> None:
    """Main synchronous entry point for the CLI.

    Args:
        command: ``extract`` or ``translate``.
        paths: The two positional paths of the command.
        config_path: Optional YAML configuration file.
        verbose: Enable debug logging.
    """
    setup_logging(verbose)
    logger = logging.getLogger(__name__)

    try:
        console.print("[bold cyan]Web i18n Translation Tool[/bold cyan]")
        console.print("[dim]" + "─" * 50 + "[/dim]")

        config = load_config(config_path)
        if config_path:
            logger.info("Configuration loaded from %s", config_path)

        if command == "extract":
            extract(config, paths[0], paths[1])
        else:
            logger.info("Using model: %s", config.llm.model)
            translate(config, paths[0], paths[1])

    except FileNotFoundError as e:
        console.print(f"[red bold]Error:[/red bold] {e}")
        raise SystemExit(1)
    except ValueError as e:
        console.print(f"[red bold]Configuration error:[/red bold] {e}")
        raise SystemExit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Translation cancelled by user.[/yellow]")
        raise SystemExit(130)
    except Exception as e:
        logger.exception("Unexpected error: %s", e)
        raise SystemExit(1)
