"""
Connection credential model.
Holds the identity the reaper uses to find processes of its own user and database.
"""

from dataclasses import dataclass
from urllib.parse import unquote, urlsplit

from psycopg.conninfo import conninfo_to_dict


POSTGRES_SCHEMES = ("postgres", "postgresql")


@dataclass(frozen=True)
class ConnCredential:
    """
    Identity parsed from a connection string.
    User and database are empty when the string is not a database URL.
    """

    user: str = ""
    database: str = ""
    url: str = ""


def parse_url(connection_string: str) -> ConnCredential:
    """
    Parse user and database out of a connection string.

    Both postgres:// URLs and libpq key/value strings are understood. A URL
    of another kind, for example "https://example.com", yields empty strings.
    A structurally broken string raises.

    :param connection_string: The connection string passed to connect.
    :returns: The parsed ConnCredential.
    :raises ValueError: If the URL netloc cannot be parsed.
    :raises psycopg.ProgrammingError: If a key/value string is malformed.
    """
    parsed = urlsplit(connection_string)
    # Accessing port validates the netloc
    _ = parsed.port

    if parsed.scheme in POSTGRES_SCHEMES:
        user = unquote(parsed.username) if parsed.username else ""
        database = unquote(parsed.path.replace("/", "", 2))
        return ConnCredential(user=user, database=database, url=connection_string)

    if not parsed.scheme and "=" in connection_string:
        params = conninfo_to_dict(connection_string)
        return ConnCredential(
            user=str(params.get("user", "")),
            database=str(params.get("dbname", "")),
            url=connection_string,
        )

    return ConnCredential(url=connection_string)
