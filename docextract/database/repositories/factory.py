from docextract.config.settings import Settings
from docextract.database.repositories.base import BaseDocumentRepository
from docextract.database.repositories.document_repository import PostgresDocumentRepository
from docextract.database.repositories.memory_repository import InMemoryDocumentRepository


class DocumentRepositoryFactory:
    """Creates the record store selected by settings."""

    STORES: dict[str, type[BaseDocumentRepository]] = {
        "postgres": PostgresDocumentRepository,
        "memory": InMemoryDocumentRepository,
    }

    @classmethod
    def create(cls, settings: Settings) -> BaseDocumentRepository:
        store = settings.record_store.lower()
        store_cls = cls.STORES.get(store)
        if store_cls is None:
            raise ValueError(
                f"Unknown record store '{store}'. Choose from: {list(cls.STORES)}"
            )
        return store_cls()
