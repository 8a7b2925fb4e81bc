from dataclasses import dataclass

from mongoengine import connect, disconnect

from core.logger import get_logger

logger = get_logger("database")

DB_ALIAS = "default"


@dataclass
class Database:
    """Handle to an open mongoengine connection, created once per process."""

    alias: str
    client: object


def init_db(settings, mongo_client_class=None, alias: str = DB_ALIAS) -> Database:
    options = {"host": settings.MONGO_URI, "alias": alias, "uuidRepresentation": "standard"}
    if mongo_client_class is not None:
        options["mongo_client_class"] = mongo_client_class

    client = connect(**options)
    logger.info("MongoDB connected (alias=%s)", alias)
    return Database(alias=alias, client=client)


def close_db(db: Database) -> None:
    disconnect(alias=db.alias)
    logger.info("MongoDB disconnected (alias=%s)", db.alias)
