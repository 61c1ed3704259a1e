"""Entry point for the web i18n extraction and translation tool."""

import argparse

from web_i18n.cli import run


def main() -> None:
    """Parse CLI arguments and run the requested phase."""
    parser = argparse.ArgumentParser(
        description="Extract UI strings from a web app and translate them using an LLM",
    )
    parser.add_argument(
        "-c",
        "--config",
        default=None,
        help="Path to the YAML configuration file (default: config.yaml if present)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show per-string and per-batch details",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    extract_parser = subparsers.add_parser(
        "extract", help="Scan a source tree and write the translation catalog"
    )
    extract_parser.add_argument("source", nargs="?", default="./source")
    extract_parser.add_argument("output", nargs="?", default="translations.json")

    translate_parser = subparsers.add_parser(
        "translate", help="Translate a catalog and write locale files into the source tree"
    )
    translate_parser.add_argument("input", nargs="?", default="translations.json")
    translate_parser.add_argument("destination", nargs="?", default="./source")

    args = parser.parse_args()
    if args.command == "extract":
        paths = [args.source, args.output]
    else:
        paths = [args.input, args.destination]
    run(args.command, paths, config_path=args.config, verbose=args.verbose)


if __name__ == "__main__":
    main()
