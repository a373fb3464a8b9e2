import logging

from finance_tracker.config import Settings
from finance_tracker.storage.base import FinanceStore
from finance_tracker.storage.memory import MemoryStore
from finance_tracker.storage.sql import SqlStore

logger = logging.getLogger(__name__)


def build_store(settings: Settings) -> FinanceStore:
    if settings.DATABASE_URL:
        logger.info("Using SQL store")
        return SqlStore(settings.DATABASE_URL)
    logger.info("No DATABASE_URL provided. Running with in-memory data.")
    return MemoryStore()
