#!/usr/bin/env python3
"""
Pack Slip Pipeline - Main Entry Point.

This is the command-line entry point for the pack slip pipeline. It runs
uploaded files through text extraction, vendor detection and line-item
parsing, stores the records, and writes a JSON report for review.

Usage:
    Command Line:
        python main.py --input slip.pdf
        python main.py --input ./slips/ --output outputs/report.json
        python main.py --input slip.jpg --vendor stephens-pipe-steel --submit
        python main.py --list-vendors

    Python:
        from main import run_pipeline
        records = run_pipeline("slip.pdf")
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional, List, Dict, Any

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

# Import project modules
from config import ConfigurationManager
from packslip.utils.logger import setup_logger_from_config, set_level, get_logger
from packslip.utils.helpers import ensure_directory, format_file_size, generate_timestamp
from packslip.utils.exceptions import PackSlipError, WebhookDeliveryError


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Args:
        argv: Argument list; sys.argv is used when None.

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        description="Pack slip text extraction and line-item parsing",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    Process single pack slip:
        python main.py --input slip.pdf

    Process directory:
        python main.py --input ./slips/ --output outputs/report.json

    Force the vendor and forward the result:
        python main.py --input slip.jpg --vendor stephens-pipe-steel --submit
        """
    )

    # Input/Output arguments
    parser.add_argument(
        "--input", "-i",
        type=str,
        default=None,
        help="Pack slip file or directory of pack slips"
    )

    parser.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="JSON report path (default: outputs/packslips_<timestamp>.json)"
    )

    parser.add_argument(
        "--recursive", "-r",
        action="store_true",
        help="Search input directory recursively"
    )

    # Processing options
    parser.add_argument(
        "--vendor", "-v",
        type=str,
        default=None,
        help="Vendor id to use instead of auto-detection"
    )

    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="Path to custom configuration file"
    )

    parser.add_argument(
        "--db",
        type=str,
        default=None,
        help="SQLite database path (':memory:' keeps nothing)"
    )

    parser.add_argument(
        "--submit",
        action="store_true",
        help="Submit each parsed pack slip to the configured webhook"
    )

    parser.add_argument(
        "--list-vendors",
        action="store_true",
        help="Print the vendor registry and exit"
    )

    # Logging options
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )

    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only log warnings and errors"
    )

    args = parser.parse_args(argv)
    if not args.list_vendors and not args.input:
        parser.error("--input is required unless --list-vendors is given")
    return args


def initialize_system(args: argparse.Namespace) -> ConfigurationManager:
    """
    Initialize the pipeline with configuration and logging.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Initialized configuration manager.
    """
    if args.config:
        ConfigurationManager.reset()
    config = ConfigurationManager(args.config)

    logger = setup_logger_from_config()

    if args.debug:
        set_level(logging.DEBUG)
    elif args.quiet:
        set_level(logging.WARNING)

    logger.info("=" * 60)
    logger.info("PACK SLIP PIPELINE")
    logger.info("=" * 60)
    logger.info(f"Version: {config.get('project.version', '1.0.0')}")
    if args.input:
        logger.info(f"Input: {args.input}")

    return config


def list_vendors() -> None:
    """Print the vendor registry, priority vendors first."""
    from packslip.vendors import get_registry

    for profile in get_registry().list_vendors():
        marker = "*" if profile.priority is not None else " "
        print(f"{marker} {profile.id:<32} {profile.display_name:<36} parser={profile.parser_strategy_id}")


def collect_inputs(input_path: str, recursive: bool = False) -> List[Path]:
    """
    Resolve the input argument into a list of files to process.

    Raises:
        DocumentNotFoundError: If the path doesn't exist.
    """
    from packslip.input_handler import InputHandler
    from packslip.utils.exceptions import DocumentNotFoundError

    logger = get_logger(__name__)
    path = Path(input_path)

    if not path.exists():
        raise DocumentNotFoundError(str(path))
    if path.is_file():
        return [path]

    files = InputHandler().list_files(path, recursive=recursive)
    if not files:
        logger.warning(f"No supported files found in: {path}")
    else:
        logger.info(f"Found {len(files)} files to process")
    return files


def summarize(record) -> Dict[str, Any]:
    """Condense a record into the fields printed at the end of a run."""
    extraction = record.extraction
    return {
        "id": record.id,
        "file": record.file_name,
        "status": record.status.value,
        "method": extraction.method.value if extraction else None,
        "pages": extraction.page_count if extraction else 0,
        "vendor": record.vendor.vendor_id,
        "vendor_source": record.vendor.source.value,
        "items": len(record.line_items),
        "errors": list(record.errors),
    }


def run_pipeline(
    input_path: str,
    vendor_id: Optional[str] = None,
    db_path: Optional[str] = None,
    submit: bool = False,
    recursive: bool = False
) -> List[Dict[str, Any]]:
    """
    Run pack slips through the pipeline.

    Each file is processed independently: a file that cannot be loaded or
    processed is logged and skipped.

    Args:
        input_path: Path to a pack slip file or a directory.
        vendor_id: Vendor to use instead of auto-detection.
        db_path: Optional database path overriding configuration.
        submit: Whether to submit each record to the webhook.
        recursive: Whether to search directories recursively.

    Returns:
        List of record dictionaries.

    Example:
        >>> records = run_pipeline("slips/", db_path=":memory:")
        >>> for r in records:
        ...     print(r['file_name'], len(r['line_items']))
    """
    logger = get_logger(__name__)

    from packslip.input_handler import InputHandler
    from packslip.output_handler import PackSlipStore
    from packslip.pipeline import PackSlipPipeline

    files_to_process = collect_inputs(input_path, recursive=recursive)

    logger.info("Initializing pipeline components...")
    input_handler = InputHandler()
    store = PackSlipStore(db_path)
    pipeline = PackSlipPipeline(store=store)

    records = []

    try:
        for file_path in files_to_process:
            logger.info(f"Processing: {file_path.name}")

            try:
                document = input_handler.load(file_path)
                record = pipeline.process(document, vendor_id=vendor_id)
            except PackSlipError as e:
                logger.error(f"Error processing {file_path.name}: {e}")
                continue

            if submit and record.line_items:
                try:
                    record = pipeline.submit(record.id)
                except WebhookDeliveryError as e:
                    logger.error(f"Submission failed for {file_path.name}: {e}")
                    record = store.get(record.id)
            elif submit:
                logger.warning(f"Not submitting {file_path.name}: no line items found")

            summary = summarize(record)
            logger.info(
                f"  {summary['status']}: method={summary['method']}, pages={summary['pages']}, "
                f"vendor={summary['vendor'] or 'unknown'}, items={summary['items']}, "
                f"size={format_file_size(record.file_size)}"
            )
            records.append(record.to_dict())
    finally:
        store.close()

    return records


def write_report(records: List[Dict[str, Any]], output_path: Optional[str]) -> Path:
    """
    Write processed records to a JSON report.

    Args:
        records: Record dictionaries.
        output_path: Report path; a timestamped file in the configured
            output directory when None.

    Returns:
        Path of the written report.
    """
    from config import get_config

    if output_path:
        path = Path(output_path)
        ensure_directory(path.parent)
    else:
        output_dir = ensure_directory(get_config("paths.output_dir", "outputs"))
        path = output_dir / f"packslips_{generate_timestamp()}.json"

    with open(path, "w", encoding="utf-8") as f:
        json.dump({"count": len(records), "records": records}, f, indent=2, ensure_ascii=False)

    return path


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function - entry point for command-line execution.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    try:
        args = parse_arguments(argv)

        initialize_system(args)
        logger = get_logger(__name__)

        if args.list_vendors:
            list_vendors()
            return 0

        records = run_pipeline(
            input_path=args.input,
            vendor_id=args.vendor,
            db_path=args.db,
            submit=args.submit,
            recursive=args.recursive
        )

        if not records:
            logger.error("No pack slips were processed")
            return 1

        report_path = write_report(records, args.output)

        logger.info("=" * 60)
        logger.info(f"Processing complete. {len(records)} pack slips, report: {report_path}")
        logger.info("=" * 60)

        return 0

    except PackSlipError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled by user")
        return 130

    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        if "--debug" in sys.argv:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
