"""
DDL for the pets table and schema version tracking.

The pets table has no NOT NULL or CHECK constraints on pet fields; the
provider rules are the only check on what gets written.
When the stored schema version differs from DATABASE_VERSION the table is
dropped and recreated.
"""

from psycopg import sql

from pet_provider.contract import (
    COLUMN_ID,
    COLUMN_PET_BREED,
    COLUMN_PET_GENDER,
    COLUMN_PET_NAME,
    COLUMN_PET_WEIGHT,
    DATABASE_VERSION,
    TABLE_NAME,
)
from pet_provider.observability.logger import get_logger

logger = get_logger(__name__)

SQLITE_CREATE_PETS = f"""
    CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
        {COLUMN_ID} INTEGER PRIMARY KEY AUTOINCREMENT,
        {COLUMN_PET_NAME} TEXT,
        {COLUMN_PET_BREED} TEXT,
        {COLUMN_PET_GENDER} INTEGER,
        {COLUMN_PET_WEIGHT} INTEGER
    )
"""

POSTGRES_CREATE_PETS = sql.SQL("""
    CREATE TABLE IF NOT EXISTS {table} (
        {id} BIGINT GENERATED BY DEFAULT AS IDENTITY PRIMARY KEY,
        {name} TEXT,
        {breed} TEXT,
        {gender} INTEGER,
        {weight} INTEGER
    )
""").format(
    table=sql.Identifier(TABLE_NAME),
    id=sql.Identifier(COLUMN_ID),
    name=sql.Identifier(COLUMN_PET_NAME),
    breed=sql.Identifier(COLUMN_PET_BREED),
    gender=sql.Identifier(COLUMN_PET_GENDER),
    weight=sql.Identifier(COLUMN_PET_WEIGHT),
)

POSTGRES_CREATE_METADATA = """
    CREATE TABLE IF NOT EXISTS pet_provider_metadata (
        key TEXT PRIMARY KEY,
        value TEXT
    )
"""


def ensure_sqlite_schema(conn, version: int = DATABASE_VERSION) -> None:
    """
    Create or upgrade the pets table on a sqlite3 connection.

    The schema version is kept in PRAGMA user_version.
    """
    current = conn.execute("PRAGMA user_version").fetchone()[0]
    with conn:
        if current not in (0, version):
            logger.warning(
                "Schema version changed, recreating table",
                extra={"table": TABLE_NAME, "from_version": current, "to_version": version},
            )
            conn.execute(f"DROP TABLE IF EXISTS {TABLE_NAME}")
        conn.execute(SQLITE_CREATE_PETS)
        conn.execute(f"PRAGMA user_version = {int(version)}")


def ensure_postgres_schema(pool, version: int = DATABASE_VERSION) -> None:
    """
    Create or upgrade the pets table through a DatabaseConnectionPool.

    The schema version is kept in the pet_provider_metadata table.
    """
    with pool.get_connection() as conn:
        with conn.cursor() as cur:
            cur.execute(POSTGRES_CREATE_METADATA)
            cur.execute(
                "SELECT value FROM pet_provider_metadata WHERE key = 'schema_version'"
            )
            row = cur.fetchone()
            current = int(row["value"]) if row else 0

            if current not in (0, version):
                logger.warning(
                    "Schema version changed, recreating table",
                    extra={"table": TABLE_NAME, "from_version": current, "to_version": version},
                )
                cur.execute(sql.SQL("DROP TABLE IF EXISTS {}").format(sql.Identifier(TABLE_NAME)))

            cur.execute(POSTGRES_CREATE_PETS)
            cur.execute(
                """
                INSERT INTO pet_provider_metadata (key, value)
                VALUES ('schema_version', %s)
                ON CONFLICT (key) DO UPDATE SET value = EXCLUDED.value
                """,
                (str(version),),
            )
