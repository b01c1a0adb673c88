"""Actionable error catalog for pgbackup."""

from typing import Dict

_ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    "discovery_failed": {
        "what": "Could not fetch database list from {host} as {user} via database {database}.",
        "next": "Verify that {database} exists and {user} has access.",
    },
    "no_databases": {
        "what": "No backup-eligible databases were found on {host}.",
        "next": "Check that {user} can see the databases in pg_database.",
    },
    "dump_failed": {
        "what": "Failed to back up database {database}.",
        "next": "Check that {user} has read access to {database} and that pg_dump matches the server version.",
    },
    "remote_unavailable": {
        "what": "{binary} not found; remote upload and retention are skipped.",
        "next": "Install {binary} to enable remote uploads. Local backups are available at {backup_dir}.",
    },
    "password_file_unreadable": {
        "what": "Could not read password file: {path}",
        "next": "Check the path and its permissions, or pass the password through POSTGRES_PASSWORD.",
    },
}


def actionable_error(code: str, **kwargs: str) -> str:
    if code not in _ERROR_MESSAGES:
        raise KeyError(f"Unknown error catalog key: {code}")

    template = _ERROR_MESSAGES[code]
    what = template["what"].format(**kwargs)
    next_step = template["next"].format(**kwargs)
    return f"{what} Suggested action: {next_step}"
