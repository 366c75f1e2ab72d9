"""Dependency Injection Container."""

from injector import Injector, Module, provider, singleton

from ..agents.fallback import FallbackGenerator
from ..agents.screen_generator import ScreenGenerator
from ..clients.board import BoardClient
from ..clients.completion import CompletionClient
from ..export import FeatureExporter
from ..handlers import ExportHandler, ScreensHandler
from ..models.config import CompletionConfig
from ..monitoring import MetricsCollector, metrics_collector
from ..parsing import ScreenSetParser
from ..storage import LocalCache, ScreenRepository, SqlScreenStore, create_store_engine
from .config import Settings, get_settings


class CoreModule(Module):
    """Core dependencies."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    @provider
    def provide_settings(self) -> Settings:
        return self.settings

    @singleton
    @provider
    def provide_metrics(self) -> MetricsCollector:
        return metrics_collector

    @singleton
    @provider
    def provide_completion_client(self) -> CompletionClient:
        """Provide the completion client configured from settings."""
        return CompletionClient(
            CompletionConfig.from_settings(self.settings),
            timeout=self.settings.generation_timeout,
        )

    @singleton
    @provider
    def provide_screen_generator(
        self, client: CompletionClient, metrics: MetricsCollector
    ) -> ScreenGenerator:
        """Provide screen generator with its parser and fallback."""
        return ScreenGenerator(
            client=client,
            fallback=FallbackGenerator(),
            parser=ScreenSetParser(repair=self.settings.repair_responses),
            timeout=self.settings.generation_timeout,
            summary_max_chars=self.settings.summary_max_chars,
            metrics=metrics,
        )

    @singleton
    @provider
    def provide_local_cache(self) -> LocalCache:
        return LocalCache(
            max_size=self.settings.local_cache_size, ttl_seconds=self.settings.local_cache_ttl
        )

    @singleton
    @provider
    def provide_store(self) -> SqlScreenStore:
        return SqlScreenStore(create_store_engine(self.settings.database_url))

    @singleton
    @provider
    def provide_repository(
        self, store: SqlScreenStore, cache: LocalCache, metrics: MetricsCollector
    ) -> ScreenRepository:
        return ScreenRepository(
            store,
            cache,
            fail_max=self.settings.store_fail_max,
            reset_timeout=self.settings.store_reset_timeout,
            metrics=metrics,
        )

    @singleton
    @provider
    def provide_board_client(self) -> BoardClient:
        return BoardClient(
            api_url=self.settings.board_api_url,
            api_key=self.settings.board_api_key,
            timeout=self.settings.board_timeout,
        )

    @singleton
    @provider
    def provide_exporter(self, client: BoardClient, metrics: MetricsCollector) -> FeatureExporter:
        return FeatureExporter(
            client,
            board_web_url=self.settings.board_web_url,
            card_delay=self.settings.export_card_delay,
            backoff_base=self.settings.export_backoff_base,
            max_retries=self.settings.export_max_retries,
            metrics=metrics,
        )

    @singleton
    @provider
    def provide_screens_handler(
        self, generator: ScreenGenerator, repository: ScreenRepository
    ) -> ScreensHandler:
        return ScreensHandler(
            generator, repository, summary_max_chars=self.settings.summary_max_chars
        )

    @singleton
    @provider
    def provide_export_handler(self, exporter: FeatureExporter) -> ExportHandler:
        return ExportHandler(exporter)


def create_container(settings: Settings | None = None) -> Injector:
    """Create configured injector."""
    return Injector([CoreModule(settings or get_settings())])
