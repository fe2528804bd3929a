"""Tests for BackupScheduler."""

import asyncio
import json
from unittest.mock import MagicMock, patch

import pytest

from estoque.config import load_config


@pytest.fixture
def config(tmp_path):
    config = load_config()
    config.store.backend = "sqlite"
    config.store.sqlite.path = str(tmp_path / "estoque.db")
    config.backup.output_dir = str(tmp_path / "backups")
    return config


def _scheduler(config):
    pytest.importorskip("apscheduler")
    from estoque.scheduler import BackupScheduler

    return BackupScheduler(config)


def test_scheduler_not_running_initially(config):
    scheduler = _scheduler(config)
    assert scheduler.running is False


def test_setup_jobs_registers_backup(config):
    config.backup.schedule = "15 4 * * *"
    scheduler = _scheduler(config)
    scheduler.setup_jobs()

    jobs = scheduler.get_jobs()
    assert [j["id"] for j in jobs] == ["backup"]


def test_invalid_cron(config):
    config.backup.schedule = "todo dia"
    scheduler = _scheduler(config)
    with pytest.raises(ValueError, match="cron"):
        scheduler.setup_jobs()


def test_run_backup_writes_file(config):
    scheduler = _scheduler(config)

    path = asyncio.run(scheduler.run_backup())

    assert path is not None
    assert path.parent.name == "backups"
    assert path.name.startswith("backup-estoque-")
    envelope = json.loads(path.read_text(encoding="utf-8"))
    assert envelope["version"] == "1.0"
    assert envelope["data"]["products"] == []


def test_run_backup_uploads_when_enabled(config):
    config.backup.upload = True
    config.gdrive.backup_folder_id = "backups"
    scheduler = _scheduler(config)

    archive = MagicMock()
    archive.publish.return_value = "file_1"
    with patch("estoque.gdrive.DriveArchive", return_value=archive) as cls:
        path = asyncio.run(scheduler.run_backup())

    assert cls.call_args.args[0].backup_folder_id == "backups"
    artifact = archive.publish.call_args.args[0]
    assert artifact.filename == path.name
    assert artifact.content == path.read_bytes()


def test_run_backup_keeps_file_when_upload_fails(config, caplog):
    config.backup.upload = True
    scheduler = _scheduler(config)

    archive = MagicMock()
    archive.publish.side_effect = FileNotFoundError("credenciais")
    with patch("estoque.gdrive.DriveArchive", return_value=archive):
        path = asyncio.run(scheduler.run_backup())

    assert path.exists()
    assert "Erro ao enviar o backup ao Google Drive" in caplog.text


def test_run_backup_logs_store_failure(config, caplog):
    config.store.backend = "desconhecido"
    scheduler = _scheduler(config)

    assert asyncio.run(scheduler.run_backup()) is None
    assert "Erro ao executar o backup agendado" in caplog.text
