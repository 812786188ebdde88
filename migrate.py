#!/usr/bin/env python3
"""
Gestión de migraciones de Obras360 con Alembic.

Uso:
    python migrate.py create "mensaje"   # Autogenerar revisión
    python migrate.py upgrade [rev]      # Aplicar hasta head (o rev)
    python migrate.py downgrade [rev]    # Revertir una revisión (o hasta rev)
    python migrate.py stamp [rev]        # Marcar una base existente sin migrar
    python migrate.py history | current
"""
import logging
import sys
from pathlib import Path

root_dir = Path(__file__).parent
sys.path.insert(0, str(root_dir))

from alembic import command
from alembic.config import Config

from app.core.config import settings

logger = logging.getLogger("obras360.migrate")


def get_alembic_config() -> Config:
    alembic_cfg = Config(str(root_dir / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(root_dir / "alembic"))
    alembic_cfg.set_main_option("sqlalchemy.url", settings.database_url)
    return alembic_cfg


def create_migration(cfg: Config, message: str):
    command.revision(cfg, autogenerate=True, message=message)
    logger.info("Migración creada: %s", message)


def upgrade(cfg: Config, revision: str = "head"):
    command.upgrade(cfg, revision)
    logger.info("Base de datos en %s", revision)


def downgrade(cfg: Config, revision: str = "-1"):
    command.downgrade(cfg, revision)
    logger.info("Rollback a %s ejecutado", revision)


def stamp(cfg: Config, revision: str = "head"):
    command.stamp(cfg, revision)
    logger.info("Base de datos marcada en %s", revision)


ACTIONS = {
    "upgrade": upgrade,
    "downgrade": downgrade,
    "stamp": stamp,
    "history": command.history,
    "current": command.current,
}


def main(argv):
    if len(argv) < 2:
        print(__doc__)
        return 1

    action, args = argv[1], argv[2:]
    cfg = get_alembic_config()

    if action == "create":
        if not args:
            logger.error("Se requiere un mensaje para la migración")
            return 1
        create_migration(cfg, args[0])
    elif action in ACTIONS:
        ACTIONS[action](cfg, *args)
    else:
        logger.error("Acción desconocida: %s", action)
        return 1
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    sys.exit(main(sys.argv))
