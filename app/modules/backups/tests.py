"""
Tests para respaldos (pg_dump)
"""

import os
import subprocess
import pytest

from app.core.config import settings
from app.modules.backups import router as backups_router
from app.modules.backups import service as backup_service
from app.modules.backups.service import BackupError, BackupService
from app.common.exceptions import NotFoundError, ValidationError
from conftest import create_member, headers_for


@pytest.fixture
def backup_dir(tmp_path, monkeypatch):
    directory = tmp_path / "backups"
    directory.mkdir()
    monkeypatch.setattr(settings, "BACKUP_DIR", str(directory))
    return directory


class FakeResult:
    id = "task-123"


class FakeBackupTask:
    def __init__(self):
        self.called = False

    def delay(self):
        self.called = True
        return FakeResult()


class TestBackupService:

    def test_requires_postgres(self, backup_dir):
        with pytest.raises(BackupError):
            BackupService().create_backup()

    def test_runs_pg_dump_with_password_in_env(self, backup_dir, monkeypatch):
        monkeypatch.setattr(settings, "DATABASE_URL", "postgresql+psycopg2://obras:s3creto@db:5432/obras_db")
        calls = {}

        def fake_run(args, env, **kwargs):
            calls["args"], calls["env"] = args, env
            with open(args[-1], "w") as fh:
                fh.write("-- dump")
            return subprocess.CompletedProcess(args, 0, stdout="", stderr="")

        monkeypatch.setattr(backup_service.subprocess, "run", fake_run)
        filename = BackupService().create_backup()

        assert filename.startswith("backup-") and filename.endswith(".sql")
        assert (backup_dir / filename).read_text() == "-- dump"
        assert calls["args"][0] == settings.PG_DUMP_PATH
        assert calls["args"][1] == "postgresql://obras@db:5432/obras_db"
        assert "s3creto" not in " ".join(calls["args"])
        assert calls["env"]["PGPASSWORD"] == "s3creto"

    def test_dsn_keeps_options_without_password(self, backup_dir, monkeypatch):
        monkeypatch.setattr(settings, "DATABASE_URL", "postgresql+psycopg2://obras:p%40ss@db/obras_db?sslmode=require")
        calls = {}

        def fake_run(args, env, **kwargs):
            calls["args"], calls["env"] = args, env
            return subprocess.CompletedProcess(args, 0, stdout="", stderr="")

        monkeypatch.setattr(backup_service.subprocess, "run", fake_run)
        BackupService().create_backup()

        assert calls["args"][1] == "postgresql://obras@db/obras_db?sslmode=require"
        assert calls["env"]["PGPASSWORD"] == "p@ss"

    def test_failed_dump_removes_partial_file(self, backup_dir, monkeypatch):
        monkeypatch.setattr(settings, "DATABASE_URL", "postgresql://obras@db/obras_db")

        def fake_run(args, env, **kwargs):
            with open(args[-1], "w") as fh:
                fh.write("parcial")
            raise subprocess.CalledProcessError(1, args, stderr="connection refused")

        monkeypatch.setattr(backup_service.subprocess, "run", fake_run)
        with pytest.raises(BackupError, match="connection refused"):
            BackupService().create_backup()
        assert list(backup_dir.iterdir()) == []

    def test_list_newest_first(self, backup_dir):
        old = backup_dir / "backup-old.sql"
        new = backup_dir / "backup-new.sql"
        old.write_text("a")
        new.write_text("bb")
        (backup_dir / "notas.txt").write_text("x")
        os.utime(old, (1_600_000_000, 1_600_000_000))
        os.utime(new, (1_700_000_000, 1_700_000_000))

        backups = BackupService().list_backups()
        assert [b["name"] for b in backups] == ["backup-new.sql", "backup-old.sql"]
        assert backups[0]["size"] == 2

    def test_path_is_reduced_to_basename(self, backup_dir):
        (backup_dir.parent / "fuera.sql").write_text("secreto")
        with pytest.raises(NotFoundError):
            BackupService().get_backup_path("../fuera.sql")

    @pytest.mark.parametrize("filename", ["../../etc/passwd", "..", "", "backup.txt"])
    def test_invalid_names(self, backup_dir, filename):
        with pytest.raises(ValidationError):
            BackupService().get_backup_path(filename)

    def test_symlink_outside_dir_rejected(self, backup_dir):
        target = backup_dir.parent / "otro.sql"
        target.write_text("x")
        os.symlink(target, backup_dir / "enlace.sql")
        with pytest.raises(ValidationError):
            BackupService().get_backup_path("enlace.sql")


class TestBackupEndpoints:

    def test_queue_backup(self, client, auth_headers, monkeypatch):
        task = FakeBackupTask()
        monkeypatch.setattr(backups_router, "create_backup", task)
        response = client.post("/admin/backups/", headers=auth_headers)
        assert response.status_code == 202
        assert response.json() == {"taskId": "task-123", "status": "queued"}
        assert task.called

    def test_list_download_delete(self, client, auth_headers, backup_dir):
        (backup_dir / "backup-1.sql").write_text("-- contenido")

        listed = client.get("/admin/backups/", headers=auth_headers).json()
        assert [b["name"] for b in listed] == ["backup-1.sql"]

        response = client.get("/admin/backups/backup-1.sql", headers=auth_headers)
        assert response.status_code == 200
        assert response.text == "-- contenido"

        assert client.delete("/admin/backups/backup-1.sql", headers=auth_headers).status_code == 200
        assert client.get("/admin/backups/backup-1.sql", headers=auth_headers).status_code == 404

    def test_admin_only(self, client, db, company, backup_dir):
        user = create_member(db, company, "supervisor@obras.cl", allowed_sections=["invoices:*"])
        assert client.get("/admin/backups/", headers=headers_for(user, company)).status_code == 403
