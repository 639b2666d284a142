"""Database connection settings and connection string construction."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class DatabaseSettings:
    """Where and how to connect to the connection database."""

    host: str
    port: int
    user: str
    password: str = field(repr=False)
    name: str
    ssl_mode: str
    ssl_root_cert: str = ""
    impl: str = "postgres"


def build_postgres_ssl_config_string(settings: DatabaseSettings) -> str:
    """Return the sslmode part of a PostgreSQL connection string."""
    if settings.ssl_mode == "disable":
        return "sslmode=disable"
    if settings.ssl_mode == "verify-full":
        return f"sslmode=verify-full sslrootcert={settings.ssl_root_cert}"
    raise ValueError(
        f"Invalid SSL configuration for database connection: {settings.ssl_mode}"
    )


def build_connection_info(settings: DatabaseSettings) -> str:
    """Return the key=value connection string for the configured database."""
    if settings.impl != "postgres":
        raise ValueError("Invalid SQL database impl requested")

    info = (
        f"host={settings.host} port={int(settings.port)} user={settings.user} "
        f"password={settings.password} dbname={settings.name} TimeZone=UTC"
    )
    return f"{info} {build_postgres_ssl_config_string(settings)}"