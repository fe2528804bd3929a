"""Scheduled JSON backups."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from .artifacts import save_artifact
from .exporter import Exporter
from .store import create_store

logger = logging.getLogger(__name__)


class BackupScheduler:
    """Runs a full backup on a cron schedule.

    Uses APScheduler for cron-based scheduling.
    """

    def __init__(self, config) -> None:
        """Initialize scheduler with an EstoqueConfig.

        Raises:
            ImportError: If apscheduler is not installed.
        """
        try:
            from apscheduler.schedulers.asyncio import AsyncIOScheduler
            from apscheduler.triggers.cron import CronTrigger
        except ImportError:
            raise ImportError(
                "apscheduler é necessário: pip install 'estoque[scheduler]'"
            )

        self._config = config
        self._scheduler = AsyncIOScheduler()
        self._CronTrigger = CronTrigger
        self._running = False

    def setup_jobs(self) -> None:
        """Register the backup job."""
        trigger = self._parse_cron(self._config.backup.schedule)
        self._scheduler.add_job(
            self.run_backup,
            trigger=trigger,
            id="backup",
            name="Backup do estoque",
            replace_existing=True,
        )
        logger.info("Job de backup registrado: %s", self._config.backup.schedule)

    def start(self) -> None:
        self.setup_jobs()
        self._scheduler.start()
        self._running = True
        logger.info("Agendador iniciado")

    def stop(self) -> None:
        if self._running:
            self._scheduler.shutdown(wait=False)
            self._running = False
            logger.info("Agendador parado")

    @property
    def running(self) -> bool:
        return self._running

    def get_jobs(self) -> list[dict]:
        """Return info about scheduled jobs."""
        jobs = []
        for job in self._scheduler.get_jobs():
            # Jobs added before start() have no next_run_time yet
            next_run = getattr(job, "next_run_time", None)
            jobs.append({
                "id": job.id,
                "name": job.name,
                "next_run": str(next_run) if next_run else None,
            })
        return jobs

    def _parse_cron(self, expr: str):
        """Parse a five-field cron expression into a CronTrigger."""
        parts = expr.split()
        if len(parts) == 5:
            return self._CronTrigger(
                minute=parts[0],
                hour=parts[1],
                day=parts[2],
                month=parts[3],
                day_of_week=parts[4],
            )
        raise ValueError(f"Expressão cron inválida: {expr}")

    async def run_backup(self) -> Path | None:
        """Write a backup file and optionally upload it to Google Drive.

        Failures are logged, never raised, so the schedule keeps running.
        """
        logger.info("Executando backup...")

        try:
            store = create_store(self._config)
            try:
                artifact = await Exporter(store).export_backup()
            finally:
                await store.close()
            path = save_artifact(artifact, self._config.backup.output_dir)
            logger.info("Backup salvo em %s", path)
        except Exception:
            logger.exception("Erro ao executar o backup agendado")
            return None

        if self._config.backup.upload:
            try:
                from .gdrive import DriveArchive

                archive = DriveArchive(self._config.gdrive)
                file_id = await asyncio.to_thread(archive.publish, artifact)
                logger.info("Backup enviado ao Google Drive: %s", file_id)
            except Exception:
                logger.exception("Erro ao enviar o backup ao Google Drive")
        return path
