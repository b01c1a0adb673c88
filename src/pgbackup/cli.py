import logging
import os

import click
from rich.console import Console
from rich.logging import RichHandler

from .constants import (
    DEFAULT_BACKUP_DIR,
    DEFAULT_COMPRESSION_LEVEL,
    DEFAULT_CONNECT_DATABASE,
    DEFAULT_DB_HOST,
    DEFAULT_DB_USER,
    DEFAULT_LOCAL_RETENTION_DAYS,
    DEFAULT_RCLONE_BINARY,
    DEFAULT_RCLONE_PATH,
    DEFAULT_RCLONE_REMOTE,
    DEFAULT_REMOTE_RETENTION_DAYS,
)
from .core import BackupRunner
from .errors import BackupError
from .models import BackupConfig
from .services.config_loader import ConfigLoader


def _resolve_option(cli_value, config, key, default=None):
    if cli_value is not None:
        return cli_value
    if key in config:
        return config[key]
    return default


def _build_handlers():
    progress_handler = RichHandler(
        console=Console(),
        show_level=False,
        show_path=False,
        omit_repeated_times=False,
    )
    progress_handler.addFilter(lambda record: record.levelno < logging.ERROR)

    error_handler = RichHandler(
        console=Console(stderr=True),
        level=logging.ERROR,
        rich_tracebacks=True,
        show_level=False,
        show_path=False,
        omit_repeated_times=False,
    )
    return [progress_handler, error_handler]


logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%Y-%m-%d %H:%M:%S]",
    handlers=_build_handlers(),
)


@click.command()
@click.option(
    "--config",
    required=False,
    type=click.Path(),
    help="Path to a YAML configuration file. Defaults to .pgbackup.yml if present.",
)
@click.option(
    "--backup-dir",
    envvar="BACKUP_BASE_DIR",
    required=False,
    help=f"Root directory for local backups (default: {DEFAULT_BACKUP_DIR}).",
)
@click.option(
    "--host",
    envvar="POSTGRES_HOST",
    required=False,
    help=f"PostgreSQL host (default: {DEFAULT_DB_HOST}).",
)
@click.option(
    "--user",
    envvar="POSTGRES_USER",
    required=False,
    help=f"PostgreSQL user (default: {DEFAULT_DB_USER}).",
)
@click.option(
    "--password",
    envvar="POSTGRES_PASSWORD",
    required=False,
    help="PostgreSQL password.",
)
@click.option(
    "--password-file",
    envvar="POSTGRES_PASSWORD_FILE",
    required=False,
    type=click.Path(),
    help="File holding the PostgreSQL password, used when no password is given.",
)
@click.option(
    "--connect-db",
    envvar="POSTGRES_CONNECT_DB",
    required=False,
    help=f"Existing database used to list the others (default: {DEFAULT_CONNECT_DATABASE}).",
)
@click.option(
    "--remote",
    envvar="RCLONE_REMOTE",
    required=False,
    help=f"rclone remote name (default: {DEFAULT_RCLONE_REMOTE}).",
)
@click.option(
    "--remote-path",
    envvar="RCLONE_PATH",
    required=False,
    help=f"Path prefix on the remote (default: {DEFAULT_RCLONE_PATH}).",
)
@click.option(
    "--local-retention-days",
    envvar="LOCAL_RETENTION_DAYS",
    required=False,
    type=click.IntRange(min=1),
    default=None,
    help=f"Delete local dumps this many days old (default: {DEFAULT_LOCAL_RETENTION_DAYS}).",
)
@click.option(
    "--remote-retention-days",
    envvar="REMOTE_RETENTION_DAYS",
    required=False,
    type=click.IntRange(min=1),
    default=None,
    help=f"Delete remote dumps older than this many days (default: {DEFAULT_REMOTE_RETENTION_DAYS}).",
)
@click.option(
    "--compression-level",
    envvar="BACKUP_COMPRESSION_LEVEL",
    required=False,
    type=click.IntRange(min=1, max=9),
    default=None,
    help=f"gzip compression level (default: {DEFAULT_COMPRESSION_LEVEL}).",
)
@click.option(
    "--rclone-binary",
    envvar="RCLONE_BINARY",
    required=False,
    help=f"rclone executable (default: {DEFAULT_RCLONE_BINARY}).",
)
@click.option(
    "--dry-run",
    is_flag=True,
    default=None,
    help="List databases and planned artifacts without dumping, uploading or deleting.",
)
@click.option("--verbose", is_flag=True, default=None, help="Enable verbose logging")
@click.option("--log-file", type=click.Path(), help="Path to log file")
def main(
    config,
    backup_dir,
    host,
    user,
    password,
    password_file,
    connect_db,
    remote,
    remote_path,
    local_retention_days,
    remote_retention_days,
    compression_level,
    rclone_binary,
    dry_run,
    verbose,
    log_file,
):
    """Back up every PostgreSQL database and sync the dumps to an rclone remote."""
    logger = logging.getLogger("pgbackup")

    try:
        config_loader = ConfigLoader()
        resolved_config = config
        if resolved_config is None:
            default_config_path = os.path.join(os.getcwd(), ".pgbackup.yml")
            if os.path.exists(default_config_path):
                resolved_config = default_config_path

        config_values = config_loader.load(resolved_config)
    except BackupError as exc:
        raise click.ClickException(str(exc)) from exc

    verbose = bool(_resolve_option(verbose, config_values, "verbose", default=False))
    log_file = _resolve_option(log_file, config_values, "log_file")
    dry_run = bool(_resolve_option(dry_run, config_values, "dry_run", default=False))

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.INFO)

    try:
        password = _resolve_option(password, config_values, "db_password")
        if not password:
            password_file = _resolve_option(password_file, config_values, "db_password_file")
            if password_file:
                password = config_loader.read_password_file(str(password_file))

        backup_config = BackupConfig(
            backup_dir=str(_resolve_option(backup_dir, config_values, "backup_dir", DEFAULT_BACKUP_DIR)),
            db_host=str(_resolve_option(host, config_values, "db_host", DEFAULT_DB_HOST)),
            db_user=str(_resolve_option(user, config_values, "db_user", DEFAULT_DB_USER)),
            db_password=str(password or ""),
            connect_database=str(
                _resolve_option(connect_db, config_values, "connect_database", DEFAULT_CONNECT_DATABASE)
            ),
            rclone_remote=str(_resolve_option(remote, config_values, "rclone_remote", DEFAULT_RCLONE_REMOTE)),
            rclone_path=str(_resolve_option(remote_path, config_values, "rclone_path", DEFAULT_RCLONE_PATH)),
            local_retention_days=int(
                _resolve_option(
                    local_retention_days,
                    config_values,
                    "local_retention_days",
                    DEFAULT_LOCAL_RETENTION_DAYS,
                )
            ),
            remote_retention_days=int(
                _resolve_option(
                    remote_retention_days,
                    config_values,
                    "remote_retention_days",
                    DEFAULT_REMOTE_RETENTION_DAYS,
                )
            ),
            compression_level=int(
                _resolve_option(
                    compression_level,
                    config_values,
                    "compression_level",
                    DEFAULT_COMPRESSION_LEVEL,
                )
            ),
            rclone_binary=str(
                _resolve_option(rclone_binary, config_values, "rclone_binary", DEFAULT_RCLONE_BINARY)
            ),
        )
    except (BackupError, TypeError, ValueError) as exc:
        raise click.ClickException(str(exc)) from exc

    file_handler = None
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
        file_handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
        logger.addHandler(file_handler)

    try:
        runner = BackupRunner(config=backup_config, dry_run=dry_run)
        exit_code = runner.run()
    finally:
        if file_handler is not None:
            logger.removeHandler(file_handler)
            file_handler.close()

    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
