from logging.config import fileConfig
from sqlalchemy import engine_from_config, pool
from alembic import context
from alembic.operations import ops
from app.config import DATABASE_URL
from app.domain.model_base import Base
from app.domain.user import models as user_models  # noqa: F401
from app.domain.issue import models as issue_models  # noqa: F401
from app.domain.payment import models as payment_models  # noqa: F401
import logging

# Alembic Config object
config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

if not config.get_main_option("sqlalchemy.url"):
    config.set_main_option("sqlalchemy.url", DATABASE_URL)

target_metadata = Base.metadata

logger = logging.getLogger('alembic.env')


def backfill_value(column):
    """Value written into existing rows before a new non-nullable column is enforced."""
    type_name = str(column.type).upper()
    if type_name.startswith(("INTEGER", "FLOAT", "NUMERIC")):
        return "0"
    if type_name.startswith("BOOLEAN"):
        return "false"
    if type_name.startswith("DATETIME"):
        return "CURRENT_TIMESTAMP"
    return "''"

def process_revision_directives(context, revision, directives):
    """
    Rewrites every non-nullable `add_column` into add nullable, backfill, then alter to non-nullable,
    so autogenerated revisions apply to tables that already hold rows.
    """
    script: ops.MigrationScript = directives[0]

    for table_ops in script.upgrade_ops.ops:
        if not isinstance(table_ops, ops.ModifyTableOps):
            continue

        rewritten = []
        for op in table_ops.ops:
            if not isinstance(op, ops.AddColumnOp) or op.column.nullable:
                rewritten.append(op)
                continue

            column = op.column
            column.nullable = True
            logger.info("Backfilling non-nullable column %s.%s", op.table_name, column.name)

            value = backfill_value(column)

            rewritten.append(ops.AddColumnOp(op.table_name, column, schema=op.schema))
            rewritten.append(ops.ExecuteSQLOp(
                sqltext=f"UPDATE {op.table_name} SET {column.name} = {value} WHERE {column.name} IS NULL"
            ))
            rewritten.append(ops.AlterColumnOp(
                op.table_name,
                column.name,
                existing_type=column.type,
                modify_nullable=False,
                schema=op.schema
            ))

        table_ops.ops = rewritten

def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode."""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=url.startswith("sqlite"),
        process_revision_directives=process_revision_directives
    )

    with context.begin_transaction():
        context.run_migrations()

def run_migrations_online() -> None:
    """Run migrations in 'online' mode."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=connection.dialect.name == "sqlite",
            process_revision_directives=process_revision_directives
        )

        with context.begin_transaction():
            context.run_migrations()

if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
