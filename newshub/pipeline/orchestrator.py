"""Batch summarisation and the full fetch, summarise, digest pipeline."""

import asyncio
import logging
import time
from typing import List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..config import Config, load_sources
from ..constants import SUMMARISE_BATCH_SIZE, SUMMARISE_CONCURRENCY, SummaryStatus
from ..db.articles import ArticleStorage
from ..db.base import ArticleStore, DigestStore, SourceStore
from ..db.digests import DigestStorage
from ..db.sources import SourceManager
from ..errors import AppError, is_digest_exists
from ..generation import (
    ArticleSummariser,
    BatchResult,
    DigestComposer,
    DigestResult,
    GeminiProvider,
    LLMGateway,
    OpenAICompatibleProvider,
    SummarisationResult,
    UsageTracker,
)
from ..ingestion import GNewsFetcher, IngestResult, RSSFetcher
from ..ingestion.service import ingest_all_sources
from ..models import Article
from ..speech import OpenAISpeechSynthesizer
from ..storage import SupabaseStorage

console = Console()
logger = logging.getLogger(__name__)


class SummarisationOrchestrator:
    """Summarise a batch of pending articles with bounded concurrency."""

    def __init__(
        self,
        article_store: ArticleStore,
        summariser: ArticleSummariser,
        concurrency: int = SUMMARISE_CONCURRENCY,
    ) -> None:
        self.article_store = article_store
        self.summariser = summariser
        self.concurrency = concurrency

    async def process_pending(self, batch_size: int = SUMMARISE_BATCH_SIZE) -> BatchResult:
        """
        Summarise up to batch_size pending articles, oldest fetched first.

        Every article gets a result; one article's failure, during
        summarisation or persistence, does not affect the others. Results
        for articles that an overlapping run already moved out of pending
        are discarded and left out of the counts.
        """
        articles = self.article_store.list_pending(batch_size)
        if not articles:
            return BatchResult()

        semaphore = asyncio.Semaphore(self.concurrency)

        async def summarise_with_semaphore(article: Article) -> SummarisationResult:
            async with semaphore:
                return await self.summariser.summarise_one(article)

        results = await asyncio.gather(*(summarise_with_semaphore(a) for a in articles))

        recorded: List[SummarisationResult] = []
        for result in results:
            try:
                applied = self.article_store.update_summary(
                    result.id,
                    result.status,
                    summary=result.summary,
                    category=result.category,
                    metadata=result.metadata,
                )
            except Exception as e:
                logger.error("Failed to persist summary for article %s: %s", result.id, e)
                recorded.append(result)
                continue

            if applied:
                recorded.append(result)
            else:
                logger.info("Article %s was already summarised by another run, discarding result", result.id)

        completed = sum(1 for r in recorded if r.status == SummaryStatus.COMPLETED)
        return BatchResult(
            processed=len(recorded),
            completed=completed,
            failed=len(recorded) - completed,
            results=recorded,
        )


class PipelineStage:
    """Represents a pipeline stage."""

    def __init__(self, name: str, description: str) -> None:
        self.name = name
        self.description = description
        self.start_time: Optional[float] = None
        self.end_time: Optional[float] = None
        self.success = False
        self.error: Optional[str] = None
        self.details = ""

    def start(self) -> None:
        self.start_time = time.time()

    def complete(self, details: str = "") -> None:
        self.end_time = time.time()
        self.success = True
        self.details = details

    def fail(self, error: str) -> None:
        self.end_time = time.time()
        self.success = False
        self.error = error

    @property
    def duration(self) -> float:
        if self.start_time and self.end_time:
            return self.end_time - self.start_time
        return 0.0


class PipelineOrchestrator:
    """Builds collaborators from configuration and runs the pipeline entry points."""

    def __init__(
        self,
        config: Config,
        article_store: Optional[ArticleStore] = None,
        digest_store: Optional[DigestStore] = None,
        source_store: Optional[SourceStore] = None,
        usage_tracker: Optional[UsageTracker] = None,
    ) -> None:
        self.config = config
        settings = config.config
        db_config = config.get_db_config()

        self.article_store = article_store or ArticleStorage(db_config)
        self.digest_store = digest_store or DigestStorage(db_config)
        self.source_store = source_store or SourceManager(db_config)
        self.usage_tracker = usage_tracker or UsageTracker(
            daily_limit=settings.llm.daily_soft_limit,
            warning_threshold=settings.llm.warning_threshold,
        )
        self._gateway: Optional[LLMGateway] = None
        self.stages: List[PipelineStage] = []

    @property
    def gateway(self) -> LLMGateway:
        if self._gateway is None:
            llm = self.config.config.llm
            primary = GeminiProvider(
                api_key=llm.primary.resolve_api_key(),
                model=llm.primary.model,
                temperature=llm.primary.temperature,
                max_tokens=llm.primary.max_tokens,
                timeout=llm.timeout_seconds,
            )
            fallback = OpenAICompatibleProvider(
                api_key=llm.fallback.resolve_api_key(),
                model=llm.fallback.model,
                base_url=llm.fallback.base_url,
                temperature=llm.fallback.temperature,
                max_tokens=llm.fallback.max_tokens,
                timeout=llm.timeout_seconds,
            )
            self._gateway = LLMGateway(primary, fallback, self.usage_tracker)
        return self._gateway

    def build_summarisation_orchestrator(self) -> SummarisationOrchestrator:
        pipeline = self.config.config.pipeline
        summariser = ArticleSummariser(self.gateway, relevance_threshold=pipeline.relevance_threshold)
        return SummarisationOrchestrator(
            self.article_store,
            summariser,
            concurrency=pipeline.summarise_concurrency,
        )

    def build_digest_composer(self) -> DigestComposer:
        settings = self.config.config
        synthesizer = OpenAISpeechSynthesizer(
            api_key=settings.tts.resolve_api_key(),
            model=settings.tts.model,
            voice=settings.tts.voice,
            response_format=settings.tts.response_format,
            timeout=settings.tts.timeout_seconds,
        )
        storage = SupabaseStorage(
            url=settings.storage.resolve_url(),
            service_key=settings.storage.resolve_key(),
            timeout=settings.storage.timeout_seconds,
        )
        return DigestComposer(
            self.article_store,
            self.digest_store,
            self.gateway,
            synthesizer,
            storage,
            settings=settings.pipeline,
            bucket=settings.storage.bucket,
        )

    async def fetch(self) -> List[IngestResult]:
        """Sync sources.yaml (when present) and ingest every active source."""
        settings = self.config.config
        sources = load_sources(self.config.sources_path) if self.config.sources_path.exists() else None

        rss_fetcher = RSSFetcher(timeout=settings.rss.timeout_seconds, user_agent=settings.rss.user_agent)
        gnews_fetcher = GNewsFetcher(
            api_key=settings.gnews.resolve_api_key(),
            base_url=settings.gnews.base_url,
            timeout=settings.gnews.timeout_seconds,
        )
        return await ingest_all_sources(
            self.source_store,
            self.article_store,
            rss_fetcher,
            gnews_fetcher,
            sources=sources,
        )

    async def summarise(self, batch_size: Optional[int] = None) -> BatchResult:
        orchestrator = self.build_summarisation_orchestrator()
        return await orchestrator.process_pending(batch_size or self.config.config.pipeline.summarise_batch_size)

    async def digest(self) -> DigestResult:
        return await self.build_digest_composer().generate_daily_digest()

    async def retry_audio(self, digest_id: int) -> str:
        return await self.build_digest_composer().retry_digest_audio(digest_id)

    def run(self) -> bool:
        """
        Run fetch, summarise and digest in order, stopping at the first failed stage.

        Returns:
            True if every stage succeeded
        """
        self.stages = [
            PipelineStage("fetch", "Fetching sources"),
            PipelineStage("summarise", "Summarising pending articles"),
            PipelineStage("digest", "Composing daily digest"),
        ]
        start = time.time()

        console.print(Panel.fit("AI News Hub Pipeline", style="bold blue"))
        try:
            asyncio.run(self._execute())
        finally:
            self._print_summary(time.time() - start)

        return all(stage.success for stage in self.stages)

    async def _execute(self) -> None:
        fetch_stage, summarise_stage, digest_stage = self.stages

        with console.status(fetch_stage.description):
            fetch_stage.start()
            try:
                results = await self.fetch()
            except Exception as e:
                fetch_stage.fail(str(e))
                return
            inserted = sum(r.inserted for r in results)
            skipped = sum(r.skipped for r in results)
            errors = sum(1 for r in results if not r.success)
            fetch_stage.complete(f"{len(results)} sources, {inserted} new, {skipped} duplicates, {errors} errors")

        with console.status(summarise_stage.description):
            summarise_stage.start()
            try:
                batch = await self.summarise()
            except Exception as e:
                summarise_stage.fail(str(e))
                return
            summarise_stage.complete(f"{batch.processed} processed, {batch.completed} completed, {batch.failed} not completed")

        with console.status(digest_stage.description):
            digest_stage.start()
            try:
                digest = await self.digest()
            except AppError as e:
                if is_digest_exists(e):
                    digest_stage.complete("Already exists for today")
                    return
                digest_stage.fail(e.message)
                return
            except Exception as e:
                digest_stage.fail(str(e))
                return

            if digest.skipped:
                digest_stage.complete("Skipped: not enough articles")
            else:
                audio = "with audio" if digest.audio_url else "audio failed"
                digest_stage.complete(f"Digest {digest.digest_id}, {digest.article_count} articles, {audio}")

    def _print_summary(self, total_duration: float) -> None:
        table = Table(title="Pipeline Summary")
        table.add_column("Stage", style="cyan")
        table.add_column("Status", style="bold")
        table.add_column("Duration", style="yellow")
        table.add_column("Details", style="dim")

        for stage in self.stages:
            if stage.start_time is None:
                status = "[dim]-[/dim]"
            else:
                status = "[green]✓[/green]" if stage.success else "[red]✗[/red]"
            duration = f"{stage.duration:.1f}s" if stage.duration > 0 else "-"
            details = stage.details if stage.success else (stage.error or "")
            table.add_row(stage.name.title(), status, duration, details)

        console.print(table)

        stats = self.usage_tracker.get_stats()
        mode = "fallback" if stats.using_fallback else "primary"
        console.print(
            f"Primary LLM calls {stats.date}: {stats.call_count}/{stats.limit} ({stats.percent_used}%), routing to {mode}"
        )

        if all(stage.success for stage in self.stages):
            console.print(Panel(f"[green]Pipeline completed in {total_duration:.1f}s[/green]", style="green"))
        else:
            failed = [s.name for s in self.stages if s.start_time is not None and not s.success]
            console.print(Panel(
                f"[red]Pipeline failed[/red]\n\nFailed stages: {', '.join(failed)}\nDuration: {total_duration:.1f}s",
                style="red",
            ))

