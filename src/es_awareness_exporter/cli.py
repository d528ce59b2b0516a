"""Exporter CLI.

Options left unset fall back to ES_AWARENESS_* environment variables,
then to the defaults in Settings.
"""

import logging

import typer
import uvicorn
from pydantic import ValidationError

from es_awareness_exporter.app import create_app
from es_awareness_exporter.config import Settings, configure_logging, parse_listen_address
from es_awareness_exporter.factory import create_exporter

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="es-awareness-exporter",
    help="Prometheus exporter for Elasticsearch shard allocation awareness",
    add_completion=False,
)


@app.command()
def serve(
    telemetry_addr: str = typer.Option(
        None, "--telemetry-addr", help="host:port address to listen on for the web interface"
    ),
    query_interval: float = typer.Option(
        None, "--query-interval", help="Seconds between shard list collections"
    ),
    query_timeout: float = typer.Option(
        None, "--query-timeout", help="Request timeout in seconds"
    ),
    query_retries: int = typer.Option(
        None, "--query-retries", help="Extra attempts for a failed request"
    ),
    log_level: str = typer.Option(None, "--log-level", help="Logging level (debug, info)"),
    es_address: str = typer.Option(
        None, "--es-address", help="Elasticsearch address (e.g., http://host:9200)"
    ),
) -> None:
    """
    Serve shard awareness metrics.

    Collects the shard list in the background at the configured interval
    and serves the latest result on /metrics. Runs until interrupted.
    """
    overrides = {
        "listen_address": telemetry_addr,
        "query_interval": query_interval,
        "query_timeout": query_timeout,
        "query_retries": query_retries,
        "log_level": log_level,
        "es_address": es_address,
    }

    try:
        settings = Settings(**{k: v for k, v in overrides.items() if v is not None})
        host, port = parse_listen_address(settings.listen_address)
    except (ValidationError, ValueError) as e:
        typer.echo(f"Error: invalid configuration: {e}", err=True)
        raise typer.Exit(2)

    configure_logging(settings.log_level)
    logger.info("Elasticsearch address: %s", settings.es_address)
    logger.info("Query interval: %ss", settings.query_interval)
    logger.info("Listening on: %s", settings.listen_address)

    exporter = create_exporter(settings)
    # uvicorn exits with status 1 if the socket cannot be bound
    uvicorn.run(
        create_app(exporter),
        host=host,
        port=port,
        log_level=settings.log_level,
    )


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
