"""Sequential scoring pipeline for a date range of chat sessions."""

import random
import time
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Protocol

from loguru import logger
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
)

from .aggregator import aggregate_results
from .constants import DEFAULT_SAMPLE_SIZE, SCORE_DECIMALS, LogMessage
from .dates import date_range_window
from .exceptions import (
    MissingSessionIdError,
    PerSessionError,
    RetrievalError,
    SessionQualityError,
)
from .models import BatchReport, ChatSession, SessionResult
from .normalizer import find_unrecognized, normalize_analysis
from .pacing import FixedDelayPacer, Pacer
from .scorer import score_analysis
from .stores.base import SessionStore


class AnalysisService(Protocol):
    """Anything that turns a session id into a raw analysis record."""

    async def analyze(self, *, session_id: str) -> dict[str, Any]: ...


@dataclass(frozen=True)
class SelectionPolicy:
    """Which of the retrieved sessions a run processes.

    Attributes:
        sample_size: Process a uniform random sample of at most this many
            sessions; None processes the full batch.
        seed: Seed for the sampling random generator.
    """

    sample_size: int | None = None
    seed: int | None = None

    @classmethod
    def all(cls) -> "SelectionPolicy":
        return cls()

    @classmethod
    def sample(
        cls, *, size: int = DEFAULT_SAMPLE_SIZE, seed: int | None = None
    ) -> "SelectionPolicy":
        if size < 1:
            raise ValueError(f"Sample size must be at least 1, got {size}")
        return cls(sample_size=size, seed=seed)

    def select(self, sessions: Sequence[dict[str, Any]]) -> list[dict[str, Any]]:
        """Pick the sessions to process, keeping retrieval order for full batches."""
        if self.sample_size is None or len(sessions) <= self.sample_size:
            return list(sessions)

        selected = random.Random(self.seed).sample(list(sessions), self.sample_size)
        logger.info(LogMessage.SAMPLED_SESSIONS.format(len(selected), len(sessions)))
        return selected


class SessionPipeline:
    """Retrieves, analyzes, scores and aggregates the sessions of a date range.

    Sessions are processed one at a time in retrieval order, with the pacer
    awaited between consecutive analysis requests. A session that cannot be
    scored is recorded as a failed result and never stops the batch; only
    invalid dates and store failures abort a run.

    Attributes:
        store: Session store queried for the date range.
        analysis_service: Client for the external analysis service.
        pacer: Pacing policy between consecutive analysis requests.
        selection: Which retrieved sessions to process.
        show_progress: Whether to render a progress bar while processing.
    """

    def __init__(
        self,
        *,
        store: SessionStore,
        analysis_service: AnalysisService,
        pacer: Pacer | None = None,
        selection: SelectionPolicy | None = None,
        show_progress: bool = False,
    ):
        self.store = store
        self.analysis_service = analysis_service
        self.pacer = pacer or FixedDelayPacer()
        self.selection = selection or SelectionPolicy.all()
        self.show_progress = show_progress

    async def run(
        self, *, start_date: str, end_date: str | None = None
    ) -> BatchReport:
        """Score every session recorded between two days (inclusive, UTC).

        Args:
            start_date: First day, ``YYYY-MM-DD``.
            end_date: Last day, ``YYYY-MM-DD``; defaults to ``start_date``.

        Returns:
            BatchReport: Per-session results, aggregate statistics and counts.

        Raises:
            ValidationError: If a date is malformed, before the store is queried.
            RetrievalError: If the store cannot be queried.
        """
        started = time.perf_counter()
        window = date_range_window(start_date, end_date or start_date)

        logger.info(LogMessage.SEARCHING_SESSIONS.format(*window.describe()))
        try:
            records = await self.store.find_sessions(window=window)
        except SessionQualityError:
            raise
        except Exception as e:
            raise RetrievalError(f"Session retrieval failed: {e}") from e
        logger.success(LogMessage.FOUND_SESSIONS.format(len(records)))

        sessions = [
            ChatSession.from_dict(data=record)
            for record in self.selection.select(records)
        ]
        if not sessions:
            logger.warning(LogMessage.NO_SESSIONS)

        results = await self._process_sessions(sessions)
        return self._finalize(results=results, started=started)

    async def _process_sessions(
        self, sessions: Sequence[ChatSession]
    ) -> list[SessionResult]:
        results: list[SessionResult] = []
        invoked = False

        with Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            TextColumn("[red]{task.fields[failed]} failed"),
            disable=not self.show_progress,
        ) as progress:
            task = progress.add_task(
                "Scoring sessions...", total=len(sessions), failed=0
            )
            for index, session in enumerate(sessions, 1):
                result, invoked = await self._process_one(
                    session=session,
                    index=index,
                    total=len(sessions),
                    invoked=invoked,
                )
                results.append(result)
                progress.update(
                    task,
                    advance=1,
                    failed=sum(1 for r in results if not r.succeeded),
                )

        return results

    async def _process_one(
        self, *, session: ChatSession, index: int, total: int, invoked: bool
    ) -> tuple[SessionResult, bool]:
        """Score one session, turning every per-session failure into a failed result.

        Returns:
            tuple[SessionResult, bool]: The result, and whether any analysis
            request has been sent so far in this run.
        """
        logger.info(LogMessage.PROCESSING_SESSION.format(index, total, session.id))

        try:
            if session.id is None:
                raise MissingSessionIdError("Session record has no identifier")

            if invoked:
                await self.pacer.wait()
            invoked = True

            raw = await self.analysis_service.analyze(session_id=session.id)
        except PerSessionError as e:
            logger.warning(LogMessage.SESSION_FAILED.format(session.id, e))
            return SessionResult.failure(session_id=session.id, error=str(e)), invoked
        except Exception as e:
            reason = f"Processing error: {type(e).__name__}: {e}"
            logger.warning(LogMessage.SESSION_FAILED.format(session.id, reason))
            return SessionResult.failure(session_id=session.id, error=reason), invoked

        analysis = normalize_analysis(raw)
        unrecognized = find_unrecognized(analysis)
        if unrecognized:
            logger.warning(
                LogMessage.UNRECOGNIZED_VALUES.format(session.id, unrecognized)
            )

        score = score_analysis(analysis)
        logger.info(LogMessage.SESSION_SCORED.format(session.id, score.total_score))
        result = SessionResult.success(
            session_id=session.id, analysis=analysis, score=score
        )
        return result, invoked

    def _finalize(
        self, *, results: list[SessionResult], started: float
    ) -> BatchReport:
        scored = [result for result in results if result.succeeded]
        average_score = 0
        if scored:
            total = sum(result.score.total_score for result in scored)
            average_score = round(total / len(scored), SCORE_DECIMALS)

        report = BatchReport(
            total_sessions=len(results),
            processed=len(scored),
            failed=len(results) - len(scored),
            results=results,
            aggregate=aggregate_results(results),
            average_score=average_score,
            processing_time_seconds=round(
                time.perf_counter() - started, SCORE_DECIMALS
            ),
        )
        logger.success(
            LogMessage.BATCH_COMPLETE.format(
                report.processed, report.failed, report.average_score
            )
        )
        return report
