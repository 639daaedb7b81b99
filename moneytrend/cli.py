#!/usr/bin/env python3
"""
Command-line interface for the MoneyTrend pipeline.
"""

import argparse
import sys
import json
import logging
import time
from pathlib import Path
from typing import Optional

from .analysis.money_supply_analyzer import MoneySupplyAnalyzer
from .config import PipelineConfig, load_config_from_file, save_config_to_file, get_fred_api_key
from .core.summary_statistics import growth_ratios
from .exceptions import MoneyTrendError
from .utils.data_alignment import load_table_csv
from .utils.data_structures import PipelineResults


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    # Setup logging
    setup_logging(args)

    try:
        # Route to appropriate handler
        if args.command == "run":
            return run_pipeline(args)
        elif args.command == "analyze":
            return run_analysis(args)
        elif args.command == "summary":
            return run_summary(args)
        elif args.command == "config":
            return handle_config_command(args)
    except KeyboardInterrupt:
        print("\nOperation cancelled by user", file=sys.stderr)
        return 130
    except Exception as e:
        logging.error(f"Unexpected error: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1

    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="moneytrend",
        description="MoneyTrend: money supply trend regressions and residual outlier scoring",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Fetch M2, M1 and Currency from FRED and run the full pipeline
  moneytrend run --fred-api-key YOUR_KEY --output results

  # Run the pipeline on a saved CSV (date column + one column per series)
  moneytrend analyze --data data/money_supply.csv

  # Growth ratios between two snapshots
  moneytrend summary --start-value 17878 --end-value 18656

  # Generate configuration template
  moneytrend config create --output moneytrend_config.json
        """
    )

    # Global arguments
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    parser.add_argument("--quiet", "-q", action="store_true", help="Suppress output except errors")
    parser.add_argument("--log-file", help="Log file path")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Full pipeline from FRED
    run_parser = subparsers.add_parser("run", help="Fetch series from FRED and run the pipeline")
    run_parser.add_argument("--config", "-c", help="Configuration file path")
    run_parser.add_argument("--fred-api-key", help="FRED API key (or set FRED_API_KEY env var)")
    run_parser.add_argument("--start-date", help="Start date (YYYY-MM-DD)")
    run_parser.add_argument("--end-date", help="End date (YYYY-MM-DD)")
    run_parser.add_argument("--output", "-o", default="results", help="Output directory")
    run_parser.add_argument("--save-data", action="store_true", help="Save the aligned table as CSV")

    # Pipeline on local data
    analyze_parser = subparsers.add_parser("analyze", help="Run the pipeline on a CSV file")
    analyze_parser.add_argument("--data", required=True, help="Path to CSV data file")
    analyze_parser.add_argument("--config", "-c", help="Configuration file path")
    analyze_parser.add_argument("--date-column", default="date", help="Name of the date column")
    analyze_parser.add_argument("--columns", help="Comma-separated series columns (default: all)")
    analyze_parser.add_argument("--output", "-o", default="results", help="Output directory")

    # Snapshot growth ratios
    summary_parser = subparsers.add_parser("summary", help="Growth ratios between two snapshots")
    summary_parser.add_argument("--start-value", type=float, required=True, help="Value at start of period")
    summary_parser.add_argument("--end-value", type=float, required=True, help="Value at end of period")

    # Configuration management commands
    config_parser = subparsers.add_parser("config", help="Configuration management")
    config_subparsers = config_parser.add_subparsers(dest="config_command", help="Configuration operations")

    create_config_parser = config_subparsers.add_parser("create", help="Create configuration template")
    create_config_parser.add_argument("--output", "-o", default="moneytrend_config.json",
                                      help="Output configuration file path")

    validate_config_parser = config_subparsers.add_parser("validate", help="Validate configuration file")
    validate_config_parser.add_argument("config_file", help="Configuration file to validate")

    show_config_parser = config_subparsers.add_parser("show", help="Show current configuration")
    show_config_parser.add_argument("--config", "-c", help="Configuration file path")
    show_config_parser.add_argument("--format", choices=["json", "table"], default="table",
                                    help="Output format")

    return parser


def setup_logging(args):
    """Setup logging configuration."""
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.ERROR
    else:
        level = logging.INFO

    # Configure logging
    log_format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    if hasattr(args, 'log_file') and args.log_file:
        logging.basicConfig(
            level=level,
            format=log_format,
            handlers=[
                logging.FileHandler(args.log_file),
                logging.StreamHandler(sys.stdout)
            ]
        )
    else:
        logging.basicConfig(level=level, format=log_format)


def load_pipeline_config(config_file: Optional[str]) -> PipelineConfig:
    """Load pipeline configuration from file or create default."""
    if config_file:
        return load_config_from_file(config_file)
    return PipelineConfig()


def run_pipeline(args):
    """Fetch data from FRED and run the full pipeline."""
    from .data.collectors.fred_collector import FREDCollector

    try:
        fred_api_key = args.fred_api_key or get_fred_api_key()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    config = load_pipeline_config(args.config)
    if args.start_date:
        config.start_date = args.start_date
    if args.end_date:
        config.end_date = args.end_date
    config.output_dir = args.output

    errors = config.validate()
    if errors:
        for error in errors:
            print(f"Configuration error: {error}", file=sys.stderr)
        return 1

    output_dir = Path(args.output)
    output_dir.mkdir(parents=True, exist_ok=True)

    progress = ProgressTracker("MoneyTrend run")
    analyzer = MoneySupplyAnalyzer(config=config, collector=FREDCollector(api_key=fred_api_key))

    progress.update("Loading data from FRED API...")
    data = analyzer.load_data()

    progress.update("Running trend pipeline...")
    try:
        results = analyzer.run_analysis(data)
    except MoneyTrendError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return _finish(analyzer, results, output_dir, progress, save_data=args.save_data)


def run_analysis(args):
    """Run the pipeline on a local CSV file."""
    config = load_pipeline_config(args.config)
    config.output_dir = args.output
    columns = [c.strip() for c in args.columns.split(",")] if args.columns else None

    errors = config.validate()
    if errors:
        for error in errors:
            print(f"Configuration error: {error}", file=sys.stderr)
        return 1

    output_dir = Path(args.output)
    output_dir.mkdir(parents=True, exist_ok=True)

    progress = ProgressTracker("MoneyTrend analyze")
    progress.update(f"Loading {args.data}...")
    data = load_table_csv(args.data, date_column=args.date_column, columns=columns)

    analyzer = MoneySupplyAnalyzer(config=config)
    progress.update("Running trend pipeline...")
    try:
        results = analyzer.run_analysis(data)
    except MoneyTrendError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return _finish(analyzer, results, output_dir, progress, save_data=False)


def _finish(analyzer: MoneySupplyAnalyzer, results: PipelineResults, output_dir: Path,
            progress: "ProgressTracker", save_data: bool) -> int:
    results_file = analyzer.save_results(output_dir / "moneytrend_results.json", results)
    coefficients_file = output_dir / "coefficients.csv"
    analyzer.get_coefficient_table(results).to_csv(coefficients_file, index=False)
    if save_data:
        analyzer.save_table(output_dir / "aligned_table.csv", results)

    print_results_summary(analyzer, results)
    progress.complete(f"Results saved to {results_file} and {coefficients_file}")

    # Partial failures still produce output, but the exit code reports them
    return 1 if results.errors else 0


def print_results_summary(analyzer: MoneySupplyAnalyzer, results: PipelineResults):
    """Print a short per-series summary."""
    print("\nMoney Supply Trend Results")
    print("=" * 50)
    print(f"Rows: {len(results.table)}  "
          f"({results.table.index[0].date()} to {results.table.index[-1].date()})")

    for name, analysis in results.series.items():
        print(f"\n{name}")
        if analysis.returns is not None:
            growth = analysis.returns.annualized_growth
            print(f"  Mean annualized growth  : {growth:.4f}")
        for transform, lag1 in analyzer.engine.residual_autocorrelation_path(analysis):
            print(f"  Residual lag-1 autocorr ({transform:7}) : {lag1:.3f}")
        for report in analysis.outlier_reports:
            window = f", {report.window_count} in window" if report.window_count is not None else ""
            print(f"  z > {report.threshold:g}: {report.total_count}{window}")
        if analysis.error:
            print(f"  ✗ {analysis.error}")

    if results.summary:
        print("\nSnapshot growth")
        for name, ratios in results.summary.items():
            print(f"  {name:4} growth {ratios['growth_relative_to_start']:.4f}  "
                  f"share created {ratios['share_created_in_period']:.4f}")

    if "summary" in results.errors:
        print(f"\n✗ Summary statistics failed: {results.errors['summary']}")


def run_summary(args):
    """Print growth ratios between two snapshots."""
    try:
        ratios = growth_ratios(args.start_value, args.end_value)
    except MoneyTrendError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    print(json.dumps(ratios, indent=2))
    return 0


def handle_config_command(args):
    """Handle configuration management commands."""
    if args.config_command == "create":
        return create_config_template(args)
    elif args.config_command == "validate":
        return validate_config_file(args)
    elif args.config_command == "show":
        return show_config(args)
    else:
        print("Unknown config command", file=sys.stderr)
        return 1


def create_config_template(args):
    """Create configuration template."""
    output_file = Path(args.output)
    save_config_to_file(PipelineConfig(), str(output_file))
    print(f"Configuration template created: {output_file}")
    return 0


def validate_config_file(args):
    """Validate configuration file."""
    config_file = Path(args.config_file)

    if not config_file.exists():
        print(f"Configuration file not found: {config_file}", file=sys.stderr)
        return 1

    try:
        config = load_config_from_file(str(config_file))
    except (json.JSONDecodeError, TypeError) as e:
        print(f"✗ Configuration file could not be loaded: {e}", file=sys.stderr)
        return 1

    errors = config.validate()
    if errors:
        print("✗ Configuration validation failed:")
        for error in errors:
            print(f"  - {error}")
        return 1

    print("✓ Configuration is valid")
    return 0


def show_config(args):
    """Show current configuration."""
    config = load_pipeline_config(args.config)
    config_dict = config.to_dict()

    if args.format == "json":
        print(json.dumps(config_dict, indent=2, default=str))
    else:
        print("Current Configuration:")
        print("=" * 50)
        for key, value in config_dict.items():
            print(f"{key:30} : {value}")
    return 0


class ProgressTracker:
    """Simple progress tracker for CLI operations."""

    def __init__(self, operation_name: str):
        self.operation_name = operation_name
        self.start_time = time.time()

    def update(self, message: str):
        elapsed = time.time() - self.start_time
        print(f"[{elapsed:.1f}s] {self.operation_name}: {message}")

    def complete(self, message: str):
        elapsed = time.time() - self.start_time
        print(f"[{elapsed:.1f}s] {self.operation_name}: {message}")


if __name__ == "__main__":
    sys.exit(main())
