"""Command-line interface for the Hacker News thread scraper."""

import asyncio
import logging
import logging.config
import sys
from typing import List, Optional

import typer
from typing_extensions import Annotated

from hn_scraper.collector.collector import ThreadCollector, sort_comments
from hn_scraper.config import Config
from hn_scraper.errors import ConfigError, HNScraperError
from hn_scraper.hn_client import HNClient
from hn_scraper.monitoring.metrics import PrometheusExporter
from hn_scraper.storage.json_cache import JsonCacheStore
from hn_scraper.storage.output_sink import JsonOutputSink
from hn_scraper.text_filter import filter_comments, parse_keywords

app = typer.Typer(help="Hacker News thread scraper - Fetch and filter the comments of a thread")

cache_app = typer.Typer(help="Inspect and clear the thread cache")
app.add_typer(cache_app, name="cache")

logger = logging.getLogger(__name__)


def setup_logging(log_level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Set up logging configuration.

    Console logs go to stderr; stdout is reserved for the JSON output.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file to also write logs to
    """
    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "level": log_level,
            "formatter": "standard",
            "stream": "ext://sys.stderr",
        },
    }
    if log_file:
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": log_level,
            "formatter": "standard",
            "filename": log_file,
            "maxBytes": 10485760,  # 10 MB
            "backupCount": 5,
            "encoding": "utf8",
        }

    log_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
            },
        },
        "handlers": handlers,
        "loggers": {
            "": {
                "handlers": list(handlers),
                "level": log_level,
                "propagate": True
            },
            "asyncio": {
                "level": "WARNING",
            },
            "aiohttp": {
                "level": "WARNING",
            },
        }
    }

    logging.config.dictConfig(log_config)


def load_config(
    config_path: str,
    cache_dir: Optional[str] = None,
    max_concurrency: Optional[int] = None,
    tolerate_failures: Optional[bool] = None,
    sort_output: Optional[bool] = None,
    pretty: Optional[bool] = None,
    metrics_file: Optional[str] = None,
) -> Config:
    """
    Load configuration and apply command-line overrides.

    Raises:
        ConfigError: If the resulting configuration is invalid
    """
    config = Config.from_files(config_path)

    if cache_dir:
        config.cache_dir = cache_dir
    if max_concurrency is not None:
        config.max_concurrency = max_concurrency
    if tolerate_failures:
        config.tolerate_child_failures = True
    if sort_output:
        config.sort_output = True
    if pretty:
        config.output_indent = 2
    if metrics_file:
        config.monitoring.textfile_path = metrics_file

    validation_errors = config.validate()
    if validation_errors:
        for error in validation_errors:
            logger.error(f"Configuration error: {error}")
        raise ConfigError(f"Invalid configuration: {'; '.join(validation_errors)}")

    return config


async def run_fetch(
    config: Config,
    thread_id: int,
    keywords: List[str],
    out_file: Optional[str],
    prometheus_exporter: Optional[PrometheusExporter] = None,
) -> int:
    """
    Resolve a thread, filter its comments and write the matches.

    Args:
        config: Application configuration
        thread_id: ID of the thread's root item
        keywords: Keywords to filter on; empty keeps every comment
        out_file: Output file, or None for stdout
        prometheus_exporter: Optional metrics exporter

    Returns:
        Number of comments written
    """
    cache = JsonCacheStore(config.cache_dir)

    async with HNClient(config) as hn_client:
        collector = ThreadCollector(
            hn_client,
            cache,
            max_concurrency=config.max_concurrency,
            tolerate_child_failures=config.tolerate_child_failures,
            prometheus_exporter=prometheus_exporter,
        )
        result = await collector.resolve_thread(thread_id)

    for failure in result.failures:
        logger.error(f"Comment {failure.item_id} missing from output: {failure.reason}")

    comments = result.comments
    if config.sort_output:
        comments = sort_comments(comments)

    filtered = filter_comments(comments, keywords)
    if keywords:
        logger.info(f"{len(filtered)} of {len(comments)} comments match keywords: {' '.join(keywords)}")

    if out_file is None:
        logger.info("No outfile specified, defaulting to stdout")

    sink = JsonOutputSink(out_file, indent=config.output_indent)
    written = sink.write(filtered)

    if prometheus_exporter:
        prometheus_exporter.record_comments_written(written)
    return written


@app.command()
def fetch(
    thread_id: Annotated[int, typer.Option("--thread-id", "-threadID", help="The ID of the HN thread to fetch")],
    out_file: Annotated[str, typer.Option("--out-file", "-outFile", help="Write comments to this file. Defaults to stdout")] = "",
    keywords: Annotated[str, typer.Option("--keywords", "-keywords", help='Keywords to filter comments on, e.g. -keywords "python remote"')] = "",
    config: Annotated[str, typer.Option("--config", "-c", help="Path to configuration file")] = "config.yaml",
    cache_dir: Annotated[Optional[str], typer.Option("--cache-dir", help="Directory for cached threads")] = None,
    max_concurrency: Annotated[Optional[int], typer.Option("--max-concurrency", help="Maximum concurrent comment requests")] = None,
    tolerate_failures: Annotated[bool, typer.Option("--tolerate-failures", help="Skip comments that fail to fetch instead of aborting")] = False,
    sort: Annotated[bool, typer.Option("--sort", help="Sort comments by ID")] = False,
    pretty: Annotated[bool, typer.Option("--pretty", help="Indent the JSON output")] = False,
    metrics_file: Annotated[Optional[str], typer.Option("--metrics-file", help="Write Prometheus metrics to this file")] = None,
    loglevel: Annotated[str, typer.Option("--loglevel", "-l", help="Logging level")] = "INFO",
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable verbose output")] = False,
) -> None:
    """
    Fetch the direct comments of a thread and write those matching the keywords as JSON.

    Threads are cached on disk after the first fetch; later runs read the cache.
    """
    log_level = "DEBUG" if verbose else loglevel.upper()
    setup_logging(log_level)

    prometheus_exporter = None
    try:
        if thread_id <= 0:
            raise ConfigError(f"threadID must be a positive integer, got {thread_id}")

        config_obj = load_config(
            config,
            cache_dir=cache_dir,
            max_concurrency=max_concurrency,
            tolerate_failures=tolerate_failures,
            sort_output=sort,
            pretty=pretty,
            metrics_file=metrics_file,
        )
        if config_obj.log_file:
            setup_logging(log_level, config_obj.log_file)

        prometheus_exporter = PrometheusExporter(config_obj.monitoring.textfile_path)
        asyncio.run(run_fetch(
            config_obj,
            thread_id=thread_id,
            keywords=parse_keywords(keywords),
            out_file=out_file or None,
            prometheus_exporter=prometheus_exporter,
        ))
    except HNScraperError as e:
        logger.error(str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(1)
    except Exception as e:
        logger.critical(f"Unhandled exception: {str(e)}", exc_info=True)
        sys.exit(1)
    finally:
        if prometheus_exporter:
            prometheus_exporter.write_textfile()


@cache_app.command("list")
def cache_list(
    config: Annotated[str, typer.Option("--config", "-c", help="Path to configuration file")] = "config.yaml",
    cache_dir: Annotated[Optional[str], typer.Option("--cache-dir", help="Directory for cached threads")] = None,
) -> None:
    """List the IDs of cached threads, one per line."""
    setup_logging("WARNING")

    try:
        config_obj = load_config(config, cache_dir=cache_dir)
        cache = JsonCacheStore(config_obj.cache_dir)
    except HNScraperError as e:
        logger.error(str(e))
        sys.exit(1)

    for thread_id in cache.list_thread_ids():
        typer.echo(thread_id)


@cache_app.command("clear")
def cache_clear(
    thread_id: Annotated[Optional[int], typer.Option("--thread-id", "-threadID", help="Only clear this thread")] = None,
    config: Annotated[str, typer.Option("--config", "-c", help="Path to configuration file")] = "config.yaml",
    cache_dir: Annotated[Optional[str], typer.Option("--cache-dir", help="Directory for cached threads")] = None,
) -> None:
    """
    Delete cached threads.

    Cache entries never expire on their own; clear a thread to pick up comments
    posted since it was first fetched.
    """
    setup_logging("INFO")

    try:
        config_obj = load_config(config, cache_dir=cache_dir)
        cache = JsonCacheStore(config_obj.cache_dir)
        if thread_id is not None:
            removed = 1 if cache.delete(thread_id) else 0
        else:
            removed = cache.clear()
    except HNScraperError as e:
        logger.error(str(e))
        sys.exit(1)

    typer.echo(f"Removed {removed} cached thread(s) from {config_obj.cache_dir}")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
