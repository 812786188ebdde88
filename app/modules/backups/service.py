"""
Respaldos SQL con pg_dump.

Los archivos viven en BACKUP_DIR; los nombres recibidos por la API se reducen
a su basename y deben resolver dentro de ese directorio.
"""
from sqlalchemy.engine import URL, make_url
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional
import os
import subprocess
import logging

from app.core.config import settings
from app.common.exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


class BackupError(Exception):
    """pg_dump falló o no está disponible"""


class BackupService:
    def __init__(self, backup_dir: Optional[str] = None):
        self.backup_dir = Path(backup_dir or settings.BACKUP_DIR).resolve()

    def _ensure_dir(self) -> None:
        self.backup_dir.mkdir(parents=True, exist_ok=True)

    def create_backup(self) -> str:
        """Ejecuta pg_dump y retorna el nombre del archivo generado"""
        self._ensure_dir()
        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S-%f")
        filename = f"backup-{timestamp}.sql"
        filepath = self.backup_dir / filename

        url = make_url(settings.database_url)
        if not url.drivername.startswith("postgresql"):
            raise BackupError(f"pg_dump requiere PostgreSQL (driver actual: {url.drivername})")

        # La contraseña va por entorno, no en la línea de comandos
        env = dict(os.environ)
        if url.password:
            env["PGPASSWORD"] = str(url.password)
        dsn = URL.create(
            "postgresql",
            username=url.username,
            host=url.host,
            port=url.port,
            database=url.database,
            query=url.query,
        ).render_as_string(hide_password=False)

        try:
            result = subprocess.run(
                [settings.PG_DUMP_PATH, dsn, "-f", str(filepath)],
                env=env,
                capture_output=True,
                text=True,
                check=True
            )
        except FileNotFoundError:
            raise BackupError(f"No se encontró {settings.PG_DUMP_PATH}")
        except subprocess.CalledProcessError as e:
            filepath.unlink(missing_ok=True)
            raise BackupError(f"pg_dump falló: {e.stderr.strip()}")

        if result.stderr:
            logger.warning(f"pg_dump stderr: {result.stderr.strip()}")
        logger.info(f"Backup created: {filename}")
        return filename

    def list_backups(self) -> List[dict]:
        """Respaldos .sql, el más reciente primero"""
        if not self.backup_dir.exists():
            return []

        backups = []
        for entry in self.backup_dir.iterdir():
            if entry.is_file() and entry.suffix == ".sql":
                stats = entry.stat()
                backups.append({
                    "name": entry.name,
                    "size": stats.st_size,
                    "date": datetime.fromtimestamp(stats.st_mtime, tz=timezone.utc),
                })
        return sorted(backups, key=lambda b: b["date"], reverse=True)

    def get_backup_path(self, filename: str) -> Path:
        safe_name = os.path.basename(filename or "")
        if not safe_name or safe_name in (".", "..") or not safe_name.endswith(".sql"):
            raise ValidationError("Nombre de archivo inválido")

        filepath = (self.backup_dir / safe_name).resolve()
        if filepath.parent != self.backup_dir:
            raise ValidationError("Nombre de archivo inválido")
        if not filepath.is_file():
            raise NotFoundError("Respaldo no encontrado")
        return filepath

    def delete_backup(self, filename: str) -> None:
        filepath = self.get_backup_path(filename)
        filepath.unlink()
        logger.info(f"Backup deleted: {filepath.name}")
