"""CLI interface for chat session quality scoring."""

import asyncio
import sys
from contextlib import AsyncExitStack
from pathlib import Path

import typer
from dotenv import load_dotenv
from loguru import logger

from .constants import (
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_MONGODB_COLLECTION,
    DEFAULT_MONGODB_DATABASE,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_PACING_DELAY_SECONDS,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    EXIT_CODE_ERROR,
    CliHelp,
    LogMessage,
)
from .dates import date_range_window
from .exceptions import SessionQualityError, ValidationError
from .models import BatchReport
from .pacing import FixedDelayPacer, Pacer, RateLimitPacer
from .pipeline import SelectionPolicy, SessionPipeline
from .storage import ReportStorage
from .stores import JsonDirectorySessionStore, MongoSessionStore, SessionStore
from .workflow import WorkflowClient

app = typer.Typer(help=CliHelp.APP)


@app.callback()
def configure(
    verbose: bool = typer.Option(False, "--verbose", "-v", help=CliHelp.VERBOSE),
) -> None:
    """Chat session quality scoring tool."""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "INFO")


def _print_summary(*, report: BatchReport) -> None:
    """Log the headline numbers of a finished batch."""
    logger.info("=== SESSION QUALITY SUMMARY ===")
    logger.info(f"Total sessions: {report.total_sessions}")
    logger.info(f"Processed: {report.processed}")
    logger.info(f"Failed: {report.failed}")
    logger.info(f"Success rate: {report.success_rate}%")
    logger.info(f"Average score: {report.average_score}")
    for result in report.failed_results:
        logger.info(f"  {result.session_id}: {result.error}")


async def _score_async(
    *,
    start_date: str,
    end_date: str | None,
    sessions_dir: Path | None,
    mongodb_uri: str | None,
    mongodb_database: str,
    mongodb_collection: str,
    workflow_invoke_url: str | None,
    workflow_id: str | None,
    workflow_username: str | None,
    workflow_password: str | None,
    sample: int | None,
    seed: int | None,
    pacing_delay: float,
    max_rate: float | None,
    timeout: float,
    max_attempts: int,
) -> BatchReport:
    """Async implementation of the score command."""
    # Reject bad dates before any connection is opened
    date_range_window(start_date, end_date or start_date)

    if not workflow_invoke_url or not workflow_id:
        raise ValidationError(
            "Workflow invoke URL and workflow ID are required. Set WORKFLOW_INVOKE_URL "
            "and WORKFLOW_ID or use --workflow-invoke-url and --workflow-id."
        )
    if sessions_dir is None and not mongodb_uri:
        raise ValidationError(
            "A session source is required. Set MONGODB_URI, use --mongodb-uri, "
            "or pass --sessions-dir."
        )

    selection = (
        SelectionPolicy.sample(size=sample, seed=seed)
        if sample
        else SelectionPolicy.all()
    )
    pacer: Pacer = (
        RateLimitPacer(max_rate=max_rate)
        if max_rate
        else FixedDelayPacer(delay=pacing_delay)
    )

    async with AsyncExitStack() as stack:
        store: SessionStore
        if sessions_dir is not None:
            logger.info(f"Reading sessions from {sessions_dir}/")
            store = JsonDirectorySessionStore(sessions_dir=sessions_dir)
        else:
            store = await stack.enter_async_context(
                MongoSessionStore.connect(
                    uri=mongodb_uri,
                    database=mongodb_database,
                    collection=mongodb_collection,
                )
            )

        client = await stack.enter_async_context(
            WorkflowClient(
                invoke_url=workflow_invoke_url,
                workflow_id=workflow_id,
                username=workflow_username,
                password=workflow_password,
                timeout=timeout,
                max_attempts=max_attempts,
            )
        )

        pipeline = SessionPipeline(
            store=store,
            analysis_service=client,
            pacer=pacer,
            selection=selection,
            show_progress=True,
        )
        return await pipeline.run(start_date=start_date, end_date=end_date)


@app.command()
def score(
    start_date: str = typer.Argument(..., help=CliHelp.START_DATE),
    end_date: str = typer.Argument(None, help=CliHelp.END_DATE),
    sessions_dir: Path = typer.Option(
        None, "--sessions-dir", "-d", help=CliHelp.SESSIONS_DIR
    ),
    mongodb_uri: str = typer.Option(
        None, "--mongodb-uri", envvar="MONGODB_URI", help="MongoDB connection string."
    ),
    mongodb_database: str = typer.Option(
        DEFAULT_MONGODB_DATABASE,
        "--mongodb-database",
        envvar="MONGODB_DATABASE",
        help="Database holding the chat sessions.",
    ),
    mongodb_collection: str = typer.Option(
        DEFAULT_MONGODB_COLLECTION,
        "--mongodb-collection",
        envvar="MONGODB_COLLECTION",
        help="Collection holding the chat sessions.",
    ),
    workflow_invoke_url: str = typer.Option(
        None,
        "--workflow-invoke-url",
        envvar="WORKFLOW_INVOKE_URL",
        help="Endpoint of the analysis workflow service.",
    ),
    workflow_id: str = typer.Option(
        None,
        "--workflow-id",
        envvar="WORKFLOW_ID",
        help="Identifier of the analysis workflow to run.",
    ),
    workflow_username: str = typer.Option(
        None,
        "--workflow-username",
        envvar="WORKFLOW_AUTH_USERNAME",
        help="Basic auth user for the workflow service.",
    ),
    workflow_password: str = typer.Option(
        None,
        "--workflow-password",
        envvar="WORKFLOW_AUTH_PASSWORD",
        help="Basic auth password for the workflow service.",
    ),
    sample: int = typer.Option(None, "--sample", "-s", min=1, help=CliHelp.SAMPLE),
    seed: int = typer.Option(None, "--seed", help=CliHelp.SEED),
    pacing_delay: float = typer.Option(
        DEFAULT_PACING_DELAY_SECONDS,
        "--pacing-delay",
        min=0,
        help=CliHelp.PACING_DELAY,
    ),
    max_rate: float = typer.Option(None, "--max-rate", help=CliHelp.MAX_RATE),
    timeout: float = typer.Option(
        DEFAULT_REQUEST_TIMEOUT_SECONDS, "--timeout", "-t", help=CliHelp.TIMEOUT
    ),
    max_attempts: int = typer.Option(
        DEFAULT_MAX_ATTEMPTS, "--max-attempts", min=1, help=CliHelp.MAX_ATTEMPTS
    ),
    output_dir: Path = typer.Option(
        DEFAULT_OUTPUT_DIR, "--output-dir", "-o", help=CliHelp.OUTPUT_DIR
    ),
    output_filename: str = typer.Option(
        None, "--output-filename", help=CliHelp.OUTPUT_FILENAME
    ),
    write_csv: bool = typer.Option(True, "--csv/--no-csv", help=CliHelp.CSV),
) -> None:
    """Score the chat sessions recorded between START_DATE and END_DATE.

    Every session found in the date range is sent to the analysis workflow,
    scored, and summarized. Sessions that fail are reported individually and
    do not stop the batch. The full report is saved as JSON.
    """
    try:
        report = asyncio.run(
            _score_async(
                start_date=start_date,
                end_date=end_date,
                sessions_dir=sessions_dir,
                mongodb_uri=mongodb_uri,
                mongodb_database=mongodb_database,
                mongodb_collection=mongodb_collection,
                workflow_invoke_url=workflow_invoke_url,
                workflow_id=workflow_id,
                workflow_username=workflow_username,
                workflow_password=workflow_password,
                sample=sample,
                seed=seed,
                pacing_delay=pacing_delay,
                max_rate=max_rate,
                timeout=timeout,
                max_attempts=max_attempts,
            )
        )
    except SessionQualityError as e:
        logger.error(LogMessage.ERROR_OCCURRED.format(e))
        raise typer.Exit(code=EXIT_CODE_ERROR)
    except Exception as e:
        logger.exception(LogMessage.ERROR_OCCURRED.format(e))
        raise typer.Exit(code=EXIT_CODE_ERROR)

    storage = ReportStorage(output_dir=output_dir)
    report_path = storage.save_report(report=report, filename=output_filename)
    if write_csv:
        storage.save_scores_csv(report=report, filepath=report_path.with_suffix(".csv"))

    _print_summary(report=report)


def run() -> None:
    """Console entry point: load ``.env`` and run the CLI."""
    load_dotenv()
    app()
