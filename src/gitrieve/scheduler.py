"""Cron-driven daemon.

Every repository with a cron expression gets one job per enabled sync
kind. Jobs run in worker threads, at most ``concurrency`` at a time; a
job that comes due while all slots are busy waits for one to free up.
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone

import structlog
from celery import Celery
from celery.schedules import ParseException, crontab

from gitrieve.core.exceptions import ConfigurationError, GitrieveError
from gitrieve.core.models.repository import RepositoryDescriptor
from gitrieve.services.sync import SyncKind, SyncService
from gitrieve.storage.base import StorageBackend

logger = structlog.get_logger(__name__)

# Only used for its timezone setting when evaluating cron expressions
_cron_app = Celery("gitrieve", set_as_current=False)


def parse_cron(expression: str, nowfun: Callable[[], datetime] | None = None) -> crontab:
    """Parse a five-field cron expression (minute hour day month weekday)."""
    fields = expression.split()
    if len(fields) != 5:
        raise ConfigurationError(
            f"Invalid cron expression: {expression!r}", details={"cron": expression}
        )
    minute, hour, day_of_month, month_of_year, day_of_week = fields
    try:
        return crontab(
            minute=minute,
            hour=hour,
            day_of_month=day_of_month,
            month_of_year=month_of_year,
            day_of_week=day_of_week,
            nowfun=nowfun,
            app=_cron_app,
        )
    except (ValueError, ParseException) as e:
        raise ConfigurationError(
            f"Invalid cron expression: {expression!r}: {e}", details={"cron": expression}
        ) from e


def next_fire_time(schedule: crontab, after: datetime) -> datetime:
    """First time strictly after ``after`` at which ``schedule`` fires."""
    start, delta, _ = schedule.remaining_delta(after)
    return start + delta


def seconds_until_next(schedule: crontab, now: datetime) -> float:
    """Seconds from ``now`` until the next time ``schedule`` fires."""
    return max((next_fire_time(schedule, now) - now).total_seconds(), 0.0)


def enabled_kinds(repo: RepositoryDescriptor) -> list[SyncKind]:
    kinds = [SyncKind.CODE]
    if repo.download_releases:
        kinds.append(SyncKind.RELEASES)
    if repo.download_issues:
        kinds.append(SyncKind.ISSUES)
    if repo.download_wiki:
        kinds.append(SyncKind.WIKI)
    if repo.download_discussion:
        kinds.append(SyncKind.DISCUSSIONS)
    return kinds


@dataclass
class ScheduledJob:
    """One sync kind of one repository on a cron schedule."""

    repository: RepositoryDescriptor
    kind: SyncKind
    backends: list[StorageBackend]
    schedule: crontab

    @property
    def name(self) -> str:
        return f"{self.repository.name}:{self.kind.value}"


class Daemon:
    """Runs scheduled sync jobs with bounded concurrency."""

    def __init__(self, service: SyncService, concurrency: int) -> None:
        self._service = service
        self._concurrency = concurrency

    def build_jobs(self) -> list[ScheduledJob]:
        jobs = []
        for repo in self._service.get_repositories():
            if not repo.cron:
                continue
            try:
                schedule = parse_cron(repo.cron)
                backends = self._service.resolve_storages(repo)
            except ConfigurationError as e:
                logger.error("Cannot schedule repository", repository=repo.name, error=e.message)
                continue
            for kind in enabled_kinds(repo):
                jobs.append(ScheduledJob(repo, kind, backends, schedule))
            logger.info("Scheduled repository", repository=repo.name, cron=repo.cron)
        return jobs

    async def _run_job(self, job: ScheduledJob, semaphore: asyncio.Semaphore) -> None:
        reference = datetime.now(timezone.utc)
        while True:
            fire_at = next_fire_time(job.schedule, reference)
            delay = (fire_at - datetime.now(timezone.utc)).total_seconds()
            await asyncio.sleep(max(delay, 0.0))
            async with semaphore:
                try:
                    await asyncio.to_thread(
                        self._service.sync_one, job.kind, job.repository, job.backends
                    )
                except GitrieveError as e:
                    logger.error("Scheduled job failed", job=job.name, error=e.message)
                except Exception:
                    # Keep the schedule alive for the next tick
                    logger.exception("Scheduled job crashed", job=job.name)
            # The next tick follows the one just served, so waking slightly
            # early cannot run the same tick twice; ticks missed while the
            # job ran long are skipped
            reference = max(fire_at, datetime.now(timezone.utc))

    async def run(self) -> None:
        jobs = self.build_jobs()
        if not jobs:
            logger.warning("No repository has a cron schedule, nothing to run")
            return
        semaphore = asyncio.Semaphore(self._concurrency)
        logger.info("Starting daemon", jobs=len(jobs), concurrency=self._concurrency)
        await asyncio.gather(*(self._run_job(job, semaphore) for job in jobs))
