"""Entorno de Alembic: usa la URL de Settings y la metadata de todos los modelos."""
from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from app.core.config import settings
from app.database.database import Base

# Registrar todas las tablas en Base.metadata
import app.modules.auth.models  # noqa: F401
import app.modules.company.models  # noqa: F401
import app.modules.clients.models  # noqa: F401
import app.modules.cost_centers.models  # noqa: F401
import app.modules.projects.models  # noqa: F401
import app.modules.workforce.models  # noqa: F401
import app.modules.invoices.models  # noqa: F401
import app.modules.daily_reports.models  # noqa: F401
import app.modules.expenses.models  # noqa: F401
import app.modules.purchase_orders.models  # noqa: F401
import app.modules.inventory.models  # noqa: F401
import app.modules.documents.models  # noqa: F401

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

if not config.get_main_option("sqlalchemy.url"):
    config.set_main_option("sqlalchemy.url", settings.database_url)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata, compare_type=True)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
