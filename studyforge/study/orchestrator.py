"""
Generation Orchestrator.

Drives one primary provider call per artifact request and, for summaries,
fans out one illustration sub-call per section on a bounded worker pool.

Flow of generate(kind, level):

    1. No source text        -> NoDocumentError (provider untouched)
    2. busy = True, active kind recorded before the call
    3. Primary call          -> store slot replaced, or GenerationFailedError
                                with the slot left as it was
    4. Summary only          -> submit N illustration jobs, return at once
    5. busy = False when the primary call settles

Illustration jobs write only their own index in the store. A failed job
marks that index FAILED and logs a warning; it never touches the summary
text, sibling indices, or the busy flag, and it is not retried.

Example:
    with GenerationOrchestrator(provider, config) as orchestrator:
        orchestrator.load_document(text)
        orchestrator.generate(ArtifactKind.SUMMARY, StudyLevel.YEAR_3)
        orchestrator.wait_for_illustrations(timeout=60)
        artifact = orchestrator.active_artifact()
"""

from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import wait as wait_futures
from typing import Any, List, Optional

from studyforge.core.config import Config
from studyforge.core.exceptions import (
    GenerationFailedError,
    IllustrationError,
    NoDocumentError,
    ProviderError,
)
from studyforge.core.logging import GenerationLogger, get_logger
from studyforge.study.artifacts import (
    Artifact,
    FlashcardsArtifact,
    GeneratedTest,
    GlossaryArtifact,
    Illustration,
    MindmapArtifact,
    SummaryArtifact,
    TestArtifact,
)
from studyforge.study.models import ArtifactKind, StructuredSummary, StudyLevel, TestType
from studyforge.study.provider import ContentProvider
from studyforge.study.store import ArtifactStore
from studyforge.study.test_session import TestSessionController

logger = get_logger(__name__)


class GenerationOrchestrator:
    """
    Tracks the active artifact and runs generation requests.

    Args:
        provider: Content provider used for every external call
        config: StudyForge configuration
        max_workers: Override for study.max_illustration_workers
    """

    def __init__(
        self,
        provider: ContentProvider,
        config: Optional[Config] = None,
        *,
        max_workers: Optional[int] = None,
    ) -> None:
        self.provider = provider
        self.config = config or Config()
        self.store = ArtifactStore()
        self.test_session = TestSessionController(provider)

        self._max_workers = max_workers or self.config.study.max_illustration_workers
        self._executor: Optional[ThreadPoolExecutor] = None
        self._lock = threading.Lock()
        self._futures: List[Future] = []
        self._closed = False

        self._source_text = ""
        self._document_name: Optional[str] = None
        self._active_kind: Optional[ArtifactKind] = None
        self._busy = False

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def busy(self) -> bool:
        """True while a primary generation call is outstanding."""
        with self._lock:
            return self._busy

    @property
    def active_kind(self) -> Optional[ArtifactKind]:
        with self._lock:
            return self._active_kind

    @property
    def source_text(self) -> str:
        return self._source_text

    @property
    def document_name(self) -> Optional[str]:
        return self._document_name

    @property
    def has_document(self) -> bool:
        return bool(self._source_text)

    def load_document(self, text: Optional[str], name: Optional[str] = None) -> None:
        """
        Replace the source document and clear everything generated so far.

        Empty or whitespace-only text leaves the orchestrator without a
        document.
        """
        text = text or ""
        self._source_text = text if text.strip() else ""
        self._document_name = name
        self.store.clear()
        self.test_session.reset()
        with self._lock:
            self._active_kind = None
        logger.info(
            "Document loaded",
            name=name or "(unnamed)",
            chars=len(self._source_text),
        )

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def generate(
        self,
        kind: ArtifactKind,
        level: StudyLevel,
        test_type: Optional[TestType] = None,
    ) -> Artifact:
        """
        Generate one artifact and make it the active one.

        Returns:
            The freshly stored artifact (summary illustrations still pending)

        Raises:
            ValueError: If kind is TEST and no test type is given
            RuntimeError: If the orchestrator was closed
            NoDocumentError: If no source text is loaded
            GenerationFailedError: If the primary provider call failed
        """
        kind = ArtifactKind(kind)
        level = StudyLevel(level)
        test_type = TestType(test_type) if test_type is not None else None
        if kind is ArtifactKind.TEST and test_type is None:
            raise ValueError("A test type is required to generate a test")
        with self._lock:
            if self._closed:
                raise RuntimeError("Orchestrator is closed")
        if not self.has_document:
            raise NoDocumentError("No document loaded")

        with self._lock:
            self._busy = True
            self._active_kind = kind

        gen_log = GenerationLogger(kind.value, level=level.value)
        gen_log.start()
        try:
            if kind is ArtifactKind.SUMMARY:
                self.store.discard_illustrations()
            elif kind is ArtifactKind.TEST:
                self.test_session.clear_attempt()

            try:
                payload = self.provider.generate_primary(
                    kind, self._source_text, level, test_type
                )
            except ProviderError as e:
                gen_log.finish(False, error=str(e))
                raise GenerationFailedError(
                    f"Could not generate {kind.value}: {e}", kind=kind.value
                ) from e

            self.store.put(kind, payload)
            if kind is ArtifactKind.TEST:
                self.test_session.start(payload, self._source_text)
            elif kind is ArtifactKind.SUMMARY:
                self._start_illustrations(payload)
            gen_log.finish(True)
        finally:
            with self._lock:
                self._busy = False

        return self._wrap(kind, payload)

    def _get_executor(self) -> ThreadPoolExecutor:
        with self._lock:
            if self._closed:
                raise RuntimeError("Orchestrator is closed")
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self._max_workers,
                    thread_name_prefix="illustration",
                )
            return self._executor

    def _start_illustrations(self, summary: StructuredSummary) -> None:
        """Submit one illustration job per section; does not wait."""
        sections = summary.sections
        round_id = self.store.begin_illustration_round(len(sections))
        if not sections:
            return

        executor = self._get_executor()
        futures = [
            executor.submit(self._illustrate, round_id, index, section.image_prompt)
            for index, section in enumerate(sections)
        ]
        with self._lock:
            self._futures = [f for f in self._futures if not f.done()] + futures

        logger.info(
            "Illustrations requested",
            sections=len(sections),
            round=round_id,
            workers=self._max_workers,
        )

    def _illustrate(self, round_id: int, index: int, prompt: str) -> None:
        """Worker body: settle exactly one index of one round."""
        try:
            image = self.provider.generate_illustration(prompt)
        except Exception as e:
            error = IllustrationError(f"Section {index}: {e}", index=index)
            logger.warning("Illustration failed", index=index, error=str(error))
            self.store.set_illustration(round_id, index, Illustration.failed(str(error)))
            return

        if image is None:
            logger.debug("No illustration returned", index=index)
            self.store.set_illustration(round_id, index, Illustration.no_image())
        else:
            self.store.set_illustration(round_id, index, Illustration.ready(image))

    def wait_for_illustrations(self, timeout: Optional[float] = None) -> bool:
        """
        Block until every outstanding illustration job has settled.

        Returns:
            False if the timeout expired first
        """
        with self._lock:
            futures = list(self._futures)
        if not futures:
            return True
        _, not_done = wait_futures(futures, timeout=timeout)
        return not not_done

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def activate(self, kind: ArtifactKind) -> Optional[Artifact]:
        """Show a kind without generating it; None if not generated yet."""
        kind = ArtifactKind(kind)
        with self._lock:
            self._active_kind = kind
        return self.artifact(kind)

    def active_artifact(self) -> Optional[Artifact]:
        kind = self.active_kind
        if kind is None:
            return None
        return self.artifact(kind)

    def artifact(self, kind: ArtifactKind) -> Optional[Artifact]:
        """Wrap the stored payload for kind in its artifact type."""
        payload: Any = self.store.get(kind)
        if payload is None:
            return None
        return self._wrap(kind, payload)

    def _wrap(self, kind: ArtifactKind, payload: Any) -> Artifact:
        if kind is ArtifactKind.SUMMARY:
            return SummaryArtifact(payload, self.store.illustrations())
        if kind is ArtifactKind.GLOSSARY:
            return GlossaryArtifact(tuple(payload))
        if kind is ArtifactKind.FLASHCARDS:
            return FlashcardsArtifact(tuple(payload))
        if kind is ArtifactKind.MINDMAP:
            return MindmapArtifact(payload)
        test: GeneratedTest = payload
        return TestArtifact(test)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self, wait: bool = True) -> None:
        """Shut the illustration pool down."""
        with self._lock:
            self._closed = True
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=wait)

    def __enter__(self) -> "GenerationOrchestrator":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()
