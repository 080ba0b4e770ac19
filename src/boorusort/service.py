"""Run orchestration: discovery, identification, classification and moves."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

from boorusort.catalog import CatalogClient, ImageConverter
from boorusort.classification import ClassificationResult, ClassificationStatus, TagClassifier
from boorusort.config import BooruSortConfig
from boorusort.identification import IdentityResolver, ResolutionKind, ResolutionOutcome
from boorusort.ingestion import DirectoryScanner, FileDescriptor, HashComputer, PendingFile
from boorusort.organization import (
    MoveOperation,
    OperationExecutor,
    OrganizationError,
    OrganizerPlanner,
)

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class FileOutcome:
    """What happened to one file during a run.

    Attributes:
        index: 1-based position of the file in the run.
        total: Number of files in the run.
        path: Original file path.
        file_hash: MD5 digest, ``None`` when the file could not be read.
        resolution: Identification outcome.
        classification: Folder computed for the file.
        operation: Planned (and, outside dry runs, applied) move.
        error: Failure that kept the file from being moved.
    """

    index: int
    total: int
    path: Path
    file_hash: Optional[str] = None
    resolution: Optional[ResolutionOutcome] = None
    classification: Optional[ClassificationResult] = None
    operation: Optional[MoveOperation] = None
    error: Optional[str] = None

    @property
    def moved(self) -> bool:
        return self.operation is not None and self.error is None


@dataclass(slots=True)
class SortReport:
    """Outcome metadata describing a completed run.

    Attributes:
        source_root: Directory files were taken from; also the quarantine root.
        target_root: Directory classified files were moved under.
        dry_run: Indicates whether the run left the filesystem untouched.
        outcomes: Per-file outcomes in processing order.
        prefetch_pages: Number of bulk hash lookup pages requested.
        request_count: Number of HTTP requests issued during the run.
    """

    source_root: Path
    target_root: Path
    dry_run: bool
    outcomes: list[FileOutcome] = field(default_factory=list)
    prefetch_pages: int = 0
    request_count: int = 0

    @property
    def counts(self) -> dict[str, int]:
        """Return summary metrics keyed by name."""
        statuses = Counter(
            outcome.classification.status
            for outcome in self.outcomes
            if outcome.classification is not None
        )
        return {
            "processed": len(self.outcomes),
            "moved": sum(1 for outcome in self.outcomes if outcome.moved),
            "sorted": statuses[ClassificationStatus.RESOLVED],
            "conflicts": statuses[ClassificationStatus.CONFLICT],
            "not_found": statuses[ClassificationStatus.NOT_FOUND],
            "multiple_matches": statuses[ClassificationStatus.MULTIPLE_MATCHES],
            "invalid": statuses[ClassificationStatus.INVALID],
            "unknown": statuses[ClassificationStatus.UNKNOWN],
            "errors": statuses[ClassificationStatus.ERROR]
            + sum(1 for outcome in self.outcomes if outcome.error is not None),
        }


def classification_for(
    outcome: ResolutionOutcome, classifier: TagClassifier
) -> ClassificationResult:
    """Map an identification outcome to a classification result."""
    if outcome.kind is ResolutionKind.FOUND and outcome.post_id is not None:
        return classifier.categorize(outcome.post_id)
    if outcome.kind is ResolutionKind.MULTIPLE_MATCHES:
        return ClassificationResult.marker(
            ClassificationStatus.MULTIPLE_MATCHES, debug_notes=outcome.debug_notes
        )
    if outcome.kind is ResolutionKind.API_ERROR:
        return ClassificationResult.marker(ClassificationStatus.ERROR, debug_notes=outcome.message)
    return ClassificationResult.marker(ClassificationStatus.NOT_FOUND)


class SortService:
    """Sort the images of one directory into classified folders.

    Args:
        config: Effective configuration.
        client: Catalog client; built from ``config.api`` when omitted.
        reverse_search: Overrides ``config.processing.reverse_search``.
        scanner: File discovery strategy.
        hasher: Content hash strategy.
    """

    def __init__(
        self,
        config: BooruSortConfig,
        *,
        client: Optional[CatalogClient] = None,
        reverse_search: Optional[bool] = None,
        scanner: Optional[DirectoryScanner] = None,
        hasher: Optional[HashComputer] = None,
    ) -> None:
        self.config = config
        self.client = client or CatalogClient(config.api)
        if reverse_search is None:
            reverse_search = bool(config.processing.reverse_search)
        self.scanner = scanner or DirectoryScanner()
        self.hasher = hasher or HashComputer()
        self.resolver = IdentityResolver(
            self.client,
            reverse_search=reverse_search,
            converter=ImageConverter(config.processing.convert),
            batch_size=config.processing.batch_size,
        )
        self.classifier = TagClassifier(config.classification, self.client)
        self.planner = OrganizerPlanner(
            folder_aliases=config.organization.folder_aliases,
            exists_folder=config.organization.exists_folder,
        )
        self.executor = OperationExecutor(
            write_debug_notes=config.organization.write_debug_notes
        )

    def load_posts_dump(self, path: Path) -> int:
        """Load a posts dump into the client cache and the hash index.

        Returns:
            int: Number of posts inserted.

        Raises:
            CatalogError: If the dump cannot be read.
        """
        count = self.client.cache.load_dump(path)
        for post in self.client.cache:
            self.resolver.index.add(post)
        LOGGER.info("Loaded %d posts from %s.", count, path)
        return count

    def save_posts_dump(self, path: Path) -> int:
        """Write every cached post to ``path``.

        Returns:
            int: Number of posts written.
        """
        self.client.cache.save_dump(path)
        return len(self.client.cache)

    def discover(self, source_root: Path) -> list[PendingFile]:
        """Return the images directly inside ``source_root`` in name order."""
        return list(self.scanner.scan(source_root))

    def run(
        self,
        source_root: Path,
        target_root: Path,
        *,
        dry_run: bool = False,
        files: Optional[list[PendingFile]] = None,
        on_file: Optional[Callable[[FileOutcome], None]] = None,
    ) -> SortReport:
        """Identify, classify and move every image in ``source_root``.

        Args:
            source_root: Directory holding the files; error folders go here.
            target_root: Directory receiving classified files.
            dry_run: Plan moves without touching the filesystem.
            files: Pre-discovered files; scanned from ``source_root`` when omitted.
            on_file: Callback invoked after each file is handled.

        Returns:
            SortReport: Per-file outcomes and metrics.

        Raises:
            FilesystemError: If a directory cannot be created or a move fails.
        """
        source_root = source_root.expanduser().resolve()
        target_root = target_root.expanduser().resolve()
        pending = files if files is not None else self.discover(source_root)
        report = SortReport(source_root=source_root, target_root=target_root, dry_run=dry_run)
        requests_before = self.client.request_count

        descriptors: list[tuple[PendingFile, Optional[FileDescriptor]]] = []
        for item in pending:
            try:
                file_hash = self.hasher.compute(item.path)
            except OSError as exc:
                LOGGER.warning("Unable to read %s: %s", item.path, exc)
                descriptors.append((item, None))
                continue
            descriptors.append((item, FileDescriptor.from_pending(item, file_hash)))

        report.prefetch_pages = self.resolver.prefetch(
            [descriptor.hash for _, descriptor in descriptors if descriptor is not None]
        )

        planned: set[Path] = set()
        total = len(descriptors)
        for index, (item, descriptor) in enumerate(descriptors, start=1):
            outcome = FileOutcome(index=index, total=total, path=item.path)
            report.outcomes.append(outcome)
            if descriptor is None:
                outcome.error = f"Unable to read {item.path.name}"
            else:
                self._process(descriptor, outcome, source_root, target_root, dry_run, planned)
            if on_file is not None:
                on_file(outcome)

        report.request_count = self.client.request_count - requests_before
        return report

    def _process(
        self,
        descriptor: FileDescriptor,
        outcome: FileOutcome,
        source_root: Path,
        target_root: Path,
        dry_run: bool,
        planned: set[Path],
    ) -> None:
        outcome.file_hash = descriptor.hash
        outcome.resolution = self.resolver.resolve(descriptor.path, descriptor.hash)
        outcome.classification = classification_for(outcome.resolution, self.classifier)

        try:
            operation = self.planner.plan_move(
                descriptor.path,
                outcome.classification,
                target_root=target_root,
                quarantine_root=source_root,
                occupied=planned,
            )
            self.executor.apply(operation, dry_run=dry_run)
        except OrganizationError as exc:
            LOGGER.error("%s", exc)
            outcome.error = str(exc)
            return

        outcome.operation = operation
        if dry_run:
            planned.add(operation.destination)


__all__ = ["SortService", "SortReport", "FileOutcome", "classification_for"]
