"""Command line interface for casetranslate."""

from __future__ import annotations

import argparse
import logging
import pathlib
import signal
import sys
from contextlib import contextmanager
from typing import Iterable, Iterator, Optional, Sequence

from .casestore import CaseStore
from .configuration import CaseTranslateConfig, get_settings, normalise_provider_name
from .errors import (
    AbortRequested,
    CaseTranslateError,
    GatewayConfigurationError,
    GatewayError,
    ItemStoreError,
    NonInteractiveAbort,
    SettingsPersistenceError,
    ValidationError,
)
from .languages import LanguageCatalog, default_catalog
from .logging_config import setup_logging
from .policy import ErrorPolicy
from .progress import ConsoleProgress, ProgressReporter
from .providers import TranslationGateway, build_gateway
from .runner import BatchRunner, BatchSummary
from .settings import Settings, SettingsStore
from .structures import ItemOutcome, Operation, OperationRequest, options_enabled_for

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="casetranslate",
        description=(
            "Detect the language of case items and append or clear translations "
            "of their text."
        ),
    )
    parser.add_argument(
        "case_file",
        nargs="?",
        help="Path to the JSON case file holding the items to process.",
    )
    parser.add_argument(
        "-o",
        "--operation",
        help=(
            "Operation to run: detect, translate, detect-translate or clear "
            "(dialog labels such as 'Detect languages' are accepted too)."
        ),
    )
    parser.add_argument(
        "-l",
        "--language",
        dest="target_language",
        help="Translation language name (defaults to the saved default language).",
    )
    parser.add_argument(
        "--save-default",
        action="store_true",
        help="Save the translation language as the default for later runs.",
    )
    parser.add_argument(
        "--apply-metadata",
        action="store_true",
        help="Record the detected language as custom metadata.",
    )
    parser.add_argument(
        "--metadata-field",
        help="Custom metadata field name for the detected language.",
    )
    parser.add_argument(
        "--tag-items",
        action="store_true",
        help="Tag items with the detected language.",
    )
    parser.add_argument(
        "--top-level-tag",
        help="Top-level tag under which detected languages are filed.",
    )
    parser.add_argument(
        "--api-key",
        help="Translation provider API key (saved for later runs).",
    )
    parser.add_argument(
        "--items",
        nargs="+",
        metavar="GUID",
        help="Only process these items, in the given order.",
    )
    parser.add_argument(
        "-p",
        "--provider",
        help="Translation provider identifier (default: google).",
    )
    parser.add_argument(
        "--settings",
        help="Path of the settings file (default: settings.json beside the program).",
    )
    parser.add_argument(
        "--stop-on-error",
        action="store_true",
        help="Stop the whole batch at the first failed item.",
    )
    parser.add_argument(
        "--non-interactive",
        action="store_true",
        help="Disable prompts and enforce automatic decisions (suitable for CI).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show detailed progress information.",
    )
    parser.add_argument(
        "--debug-provider",
        action="store_true",
        help="Log complete provider requests and responses for troubleshooting.",
    )
    parser.add_argument(
        "--list-languages",
        action="store_true",
        help="List the available translation languages and exit.",
    )
    return parser


def validate_request(
    request: OperationRequest,
    *,
    api_key: str,
    require_api_key: bool,
    metadata_field: str,
    top_level_tag: str,
    catalog: LanguageCatalog,
) -> None:
    """Reject a run whose required options are empty."""

    if require_api_key and not api_key.strip():
        raise ValidationError("Please provide a translation API key.")
    if request.apply_metadata and not metadata_field.strip():
        raise ValidationError("Please provide a Custom Metadata Field Name.")
    if request.tag_items and not top_level_tag.strip():
        raise ValidationError("Please provide a Top-level tag.")
    if request.operation.translates:
        if not request.target_language or catalog.code_for(request.target_language) is None:
            raise ValidationError(
                f"Unknown translation language '{request.target_language or ''}'. "
                "Use --list-languages to see the available languages."
            )


def resolve_api_key(
    provider: str,
    explicit: str | None,
    settings: Settings,
    config: CaseTranslateConfig,
) -> str:
    """Pick the API key from the command line, saved settings or environment."""

    if explicit and explicit.strip():
        return explicit.strip()
    if provider in {"openai", "legacy_openai"} and config.OPENAI_API_KEY:
        return config.OPENAI_API_KEY
    if settings.api_key.strip():
        return settings.api_key.strip()
    if provider == "google":
        return config.GOOGLE_TRANSLATE_API_KEY or ""
    return ""


def persisted_api_key(provider: str, explicit: str | None, settings: Settings) -> str:
    """Key to write back to the settings file.

    The file only holds the Google key, so environment keys and keys for
    other providers are never stored.
    """

    if provider == "google" and explicit and explicit.strip():
        return explicit.strip()
    return settings.api_key


def load_catalog(gateway: TranslationGateway | None) -> LanguageCatalog:
    """Ask the provider for its languages, falling back to the built-in table."""

    if gateway is None:
        return default_catalog()
    try:
        return gateway.supported_languages()
    except GatewayError as exc:
        logger.warning("%s Using the built-in language list.", exc)
        return default_catalog()


@contextmanager
def abort_on_interrupt(
progress: ProgressReporter) -> Iterator[None]:
    """Turn the first Ctrl+C into a cooperative abort request."""

    def _handler(signum, frame):  # pragma: no cover - signal delivery
        if progress.abort_requested():
            raise KeyboardInterrupt
        progress.request_abort()

    try:
        previous = signal.signal(signal.SIGINT, _handler)
    except ValueError:  # pragma: no cover - not in the main thread
        yield
        return
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


def execute_batch(
    *,
    case_file: str,
    request: OperationRequest,
    settings: Settings,
    gateway: TranslationGateway,
    catalog: LanguageCatalog,
    item_guids: Optional[Sequence[str]],
    stop_on_error: bool,
    non_interactive: bool,
    verbose: bool,
    progress: ProgressReporter | None = None,
) -> tuple[int, BatchSummary | None, str | None]:
    """Execute a batch run and return the exit code, summary, and message."""

    case_path = pathlib.Path(case_file).expanduser().resolve()
    progress = progress or ConsoleProgress(verbose=verbose)

    try:
        case = CaseStore.open(case_path)
        items = case.select(item_guids)
        runner = BatchRunner(
            case=case,
            items=items,
            request=request,
            settings=settings,
            gateway=gateway,
            catalog=catalog,
            progress=progress,
            error_policy=ErrorPolicy(
                interactive=not non_interactive,
                stop_on_error=stop_on_error,
            ),
        )
    except (ItemStoreError, ValidationError) as exc:
        return 1, None, str(exc)

    try:
        with abort_on_interrupt(progress):
            summary = runner.run()
    except NonInteractiveAbort as exc:
        return 2, None, f"{exc} Items processed so far were saved."
    except AbortRequested:
        return 2, None, "Batch aborted at your request. Items processed so far were saved."
    except KeyboardInterrupt:
        return 2, None, "Batch interrupted by user. Items processed so far were saved."
    except CaseTranslateError as exc:
        return 1, None, str(exc)

    if summary.aborted:
        return 2, summary, "Batch aborted at your request."
    return 0, summary, None


def print_summary(summary: BatchSummary) -> None:
    """Output a friendly report once processing completes."""

    print(f"\n{summary.operation.label} complete.")
    print(f"  Case file:       {summary.case_path}")
    print(
        "  Items:           "
        f"{summary.processed_items} processed / {summary.total_items} selected"
        + (" (aborted)" if summary.aborted else "")
    )
    detected = summary.count(ItemOutcome.DETECTED) + summary.count(
        ItemOutcome.DETECTED_AND_TRANSLATED
    )
    translated = summary.count(ItemOutcome.TRANSLATED) + summary.count(
        ItemOutcome.DETECTED_AND_TRANSLATED
    )
    if summary.operation.detects:
        print(f"  Detected:        {detected}")
    if summary.operation.translates:
        print(f"  Translated:      {translated} (to {summary.target_language})")
    if summary.operation is Operation.CLEAR:
        print(f"  Cleared:         {summary.count(ItemOutcome.CLEARED)}")
    print(f"  Skipped:         {summary.count(ItemOutcome.SKIPPED)}")
    if summary.count(ItemOutcome.FAILED):
        print(f"  Failed:          {summary.count(ItemOutcome.FAILED)}")
    print(f"  Provider:        {summary.provider_name}")
    print(f"  Elapsed time:    {summary.elapsed_seconds:.2f} seconds")
    if summary.error_messages:
        print("  Notes:")
        for message in summary.error_messages:
            print(f"    - {message}")


def print_languages(catalog: LanguageCatalog) -> None:
    for code in catalog:
        print(f"{code:8} {catalog[code]}")


def main(argv: Optional[Iterable[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        config = get_settings()
    except GatewayConfigurationError as exc:
        print(exc)
        return 1

    provider_debug = bool(args.debug_provider or config.CASETRANSLATE_PROVIDER_DEBUG)
    log_level = "DEBUG" if provider_debug else config.CASETRANSLATE_LOG_LEVEL
    if args.verbose and log_level.upper() in {"WARNING", "ERROR", "CRITICAL"}:
        log_level = "INFO"
    setup_logging(log_level)

    if not args.list_languages:
        if args.case_file is None:
            parser.error("the following arguments are required: case_file")
        if not args.operation:
            parser.error("the following arguments are required: -o/--operation")
        try:
            operation = Operation.parse(args.operation)
        except ValueError as exc:
            parser.error(str(exc))

    settings_path = args.settings or config.CASETRANSLATE_SETTINGS_PATH
    store = SettingsStore(pathlib.Path(settings_path).expanduser() if settings_path else None)
    settings = store.load()

    provider = normalise_provider_name(args.provider or config.CASETRANSLATE_PROVIDER)
    api_key = resolve_api_key(provider, args.api_key, settings, config)
    require_api_key = provider not in {"echo", "azure_openai"}

    gateway = None
    if api_key.strip() or not require_api_key:
        try:
            gateway = build_gateway(
                provider,
                api_key=api_key,
                config=config,
                debug=provider_debug,
            )
        except GatewayConfigurationError as exc:
            print(exc)
            return 1
    catalog = load_catalog(gateway)

    if args.list_languages:
        print_languages(catalog)
        return 0

    enabled = options_enabled_for(operation)
    apply_metadata = args.apply_metadata
    tag_items = args.tag_items
    if not enabled.detection and (apply_metadata or tag_items):
        print(f"Detection options are ignored for '{operation.label}'.")
        apply_metadata = tag_items = False
    if not enabled.translation and (args.target_language or args.save_default):
        print(f"Translation options are ignored for '{operation.label}'.")

    target_language = None
    if enabled.translation:
        target_language = args.target_language or settings.default_language

    request = OperationRequest(
        operation=operation,
        target_language=target_language,
        apply_metadata=apply_metadata,
        tag_items=tag_items,
    )

    metadata_field = (
        args.metadata_field
        if args.metadata_field is not None
        else settings.custom_metadata_field_name
    )
    top_level_tag = (
        args.top_level_tag if args.top_level_tag is not None else settings.top_level_tag
    )

    try:
        validate_request(
            request,
            api_key=api_key,
            require_api_key=require_api_key,
            metadata_field=metadata_field,
            top_level_tag=top_level_tag,
            catalog=catalog,
        )
    except ValidationError as exc:
        print(exc)
        return 1

    settings = settings.updated_from(
        api_key=persisted_api_key(provider, args.api_key, settings),
        target_language=target_language,
        save_default_language=args.save_default and enabled.translation,
        apply_metadata=apply_metadata,
        metadata_field_name=metadata_field,
        tag_items=tag_items,
        top_level_tag=top_level_tag,
    )

    exit_code, summary, message = execute_batch(
        case_file=args.case_file,
        request=request,
        settings=settings,
        gateway=gateway,
        catalog=catalog,
        item_guids=args.items,
        stop_on_error=args.stop_on_error,
        non_interactive=args.non_interactive,
        verbose=args.verbose,
    )

    if message:
        print(message)
    if summary:
        print_summary(summary)

    if exit_code in {0, 2}:
        try:
            store.save(settings)
        except SettingsPersistenceError as exc:
            print(f"Warning: {exc}")
    return exit_code


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
