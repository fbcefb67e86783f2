"""Dependency injection container for Nexus Ledger.

Wires the chart of accounts, tax categories, ledger store and the posting
engine from Settings. Components are created on first access and cached.

Usage:
    from nexus_ledger.container import Container

    with Container() as container:
        result = container.processor.process(request)
"""

from functools import cached_property
from typing import TYPE_CHECKING

from nexus_ledger.config import Settings, StoreType, get_settings
from nexus_ledger.logging_config import get_logger

if TYPE_CHECKING:
    from nexus_ledger.domain.accounts import AccountChart
    from nexus_ledger.repositories.interfaces import LedgerStore
    from nexus_ledger.repositories.sqlite import SQLiteDatabase
    from nexus_ledger.services.interfaces import CurrencyConverter
    from nexus_ledger.services.journal import JournalEntryGenerator
    from nexus_ledger.services.posting import LedgerPoster
    from nexus_ledger.services.processor import TransactionProcessor
    from nexus_ledger.services.tax_classifier import (
        InMemoryTaxCategoryProvider,
        TaxClassifier,
    )

logger = get_logger(__name__)


class Container:
    """Dependency injection container.

    The container can be configured with custom settings for testing:

        test_settings = Settings(store_type=StoreType.MEMORY)
        container = Container(settings=test_settings)
    """

    def __init__(
        self,
        settings: Settings | None = None,
        currency_converter: "CurrencyConverter | None" = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._currency_converter = currency_converter
        self._database: SQLiteDatabase | None = None
        logger.debug(
            "container_created",
            store_type=self._settings.store_type.value,
            environment=self._settings.environment.value,
        )

    @property
    def settings(self) -> Settings:
        """Get application settings."""
        return self._settings

    @cached_property
    def chart(self) -> "AccountChart":
        """Chart of accounts from the configured JSON file, or the built-in chart."""
        from nexus_ledger.domain.accounts import AccountChart, default_chart

        path = self._settings.account_chart_file
        if path is None:
            return default_chart()
        logger.info("loading_account_chart", path=str(path))
        return AccountChart.from_json(path)

    @cached_property
    def tax_categories(self) -> "InMemoryTaxCategoryProvider":
        from nexus_ledger.services.tax_classifier import InMemoryTaxCategoryProvider

        return InMemoryTaxCategoryProvider()

    @cached_property
    def tax_classifier(self) -> "TaxClassifier":
        from nexus_ledger.services.tax_classifier import TaxClassifier

        return TaxClassifier(self.tax_categories)

    @cached_property
    def store(self) -> "LedgerStore":
        """Get the ledger store.

        The SQLite store is initialized on first access.
        """
        if self._settings.store_type == StoreType.MEMORY:
            from nexus_ledger.repositories.memory import InMemoryLedgerStore

            return InMemoryLedgerStore()
        return self._create_sqlite_store()

    def _create_sqlite_store(self) -> "LedgerStore":
        from nexus_ledger.repositories.sqlite import SQLiteDatabase, SQLiteLedgerStore

        db_path = str(self._settings.sqlite_path)
        logger.info("initializing_sqlite_database", path=db_path)

        db = SQLiteDatabase(db_path)
        db.initialize()
        self._database = db
        return SQLiteLedgerStore(db)

    @cached_property
    def generator(self) -> "JournalEntryGenerator":
        from nexus_ledger.services.journal import JournalEntryGenerator

        return JournalEntryGenerator(
            decimal_places=self._settings.amount_decimal_places,
            default_par_value=self._settings.default_par_value,
        )

    @cached_property
    def poster(self) -> "LedgerPoster":
        from nexus_ledger.services.posting import LedgerPoster

        return LedgerPoster(
            self.store,
            self.chart,
            default_par_value=self._settings.default_par_value,
            base_currency=self._settings.base_currency,
        )

    @cached_property
    def processor(self) -> "TransactionProcessor":
        """Get the transaction processor, the posting engine's entry point."""
        from nexus_ledger.services.payment_status import PaymentStatusResolver
        from nexus_ledger.services.processor import TransactionProcessor

        return TransactionProcessor(
            chart=self.chart,
            generator=self.generator,
            poster=self.poster,
            resolver=PaymentStatusResolver(),
            tax_classifier=self.tax_classifier,
            currency_converter=self._currency_converter,
            base_currency=self._settings.base_currency,
            enable_tax_classification=self._settings.enable_tax_classification,
        )

    def close(self) -> None:
        """Close all resources held by the container."""
        if self._database is not None:
            logger.info("closing_database_connection")
            self._database.close()
            self._database = None

    def __enter__(self) -> "Container":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


_container: Container | None = None


def get_container() -> Container:
    """Get the global container singleton.

    For testing, create a Container directly with custom settings instead
    of using this function.
    """
    global _container
    if _container is None:
        _container = Container()
    return _container


def reset_container() -> None:
    """Reset the global container."""
    global _container
    if _container is not None:
        _container.close()
        _container = None
