import logging

import config
from stores.base import Database
from stores.jsonfile import JsonFileDatabase
from stores.memory import MemoryDatabase
from stores.mongo import MongoDatabase
from stores.resource import ProfileStore, ResourceStore, Stores, UserStore

logger = logging.getLogger("chain.stores")


def open_database() -> Database:
    if config.MONGO_URI:
        return MongoDatabase(config.MONGO_URI, config.MONGO_DB_NAME)
    if config.CHAIN_DATA_DIR:
        logger.info("Storing records as JSON files in %s", config.CHAIN_DATA_DIR)
        return JsonFileDatabase(config.CHAIN_DATA_DIR)
    logger.warning("MONGO_URI and CHAIN_DATA_DIR not provided. Records are kept in memory only.")
    return MemoryDatabase()


__all__ = ["open_database", "Stores", "ResourceStore", "UserStore", "ProfileStore"]
