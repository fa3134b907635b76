"""State synchronizer: the single owner of the application document.

The whole application state is one JSON document in a remote store. This
module keeps the in-memory copy, hands out read-only snapshots, applies
whole-document transforms immediately and writes the result back to the
store on a debounce timer, so a burst of changes becomes a single PUT.

Persistence is best effort: a failed PUT is logged, the in-memory state is
kept, and nothing is retried until the next change. The store has no
versioning, so another writer's PUT can overwrite ours (last writer wins on
the whole document).
"""

import asyncio
import logging
import re
from collections.abc import Callable
from datetime import datetime
from typing import Any, TypeVar

from pydantic import ValidationError

from yume.core.errors import (
    DocumentStoreError,
    DocumentValidationError,
    error_context,
)
from yume.models import AppDocument
from yume.services.document_store import RemoteDocumentStore

logger = logging.getLogger(__name__)

Transform = Callable[[AppDocument], AppDocument]
T = TypeVar("T")

ISO_INSTANT_PATTERN = re.compile(
    r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?(Z|[+-]\d{2}:\d{2})$"
)


def revive_dates(obj: Any) -> Any:
    """Recursively convert ISO-8601 instant strings into aware datetimes.

    The store only knows JSON, so every instant arrives as a string. Returns
    a new structure; the input is left untouched.
    """
    if isinstance(obj, dict):
        return {key: revive_dates(value) for key, value in obj.items()}
    if isinstance(obj, list):
        return [revive_dates(value) for value in obj]
    if isinstance(obj, str) and ISO_INSTANT_PATTERN.match(obj):
        try:
            return datetime.fromisoformat(obj)
        except ValueError:
            return obj
    return obj


def parse_document(raw: dict[str, Any] | None) -> AppDocument:
    """Build an AppDocument from the stored JSON.

    Raises:
        DocumentValidationError: the JSON does not fit the schema.
    """
    if raw is None:
        return AppDocument.empty()
    try:
        return AppDocument.model_validate(revive_dates(raw))
    except ValidationError:
        # A text field (comment, title) may itself look like an instant;
        # pydantic parses the typed instant fields from strings anyway.
        pass
    with error_context(
        error_types=(ValidationError,),
        default_message="Remote document has an unexpected shape",
        log_level="warning",
        wrap_as=DocumentValidationError,
    ):
        return AppDocument.model_validate(raw)


class StateSynchronizer:
    """Owns the document; all changes go through update()."""

    def __init__(self, store: RemoteDocumentStore, debounce_seconds: float = 1.5):
        self._store = store
        self._debounce_seconds = debounce_seconds
        self._document = AppDocument.empty()
        self._loaded = False
        # Transforms applied before a successful load, replayed over the loaded document
        self._early_transforms: list[Transform] = []
        self._dirty = False
        self._save_task: asyncio.Task | None = None  # Timer of the current debounce window
        # Every save task until it finishes, including ones past their timer and mid-PUT
        self._save_tasks: set[asyncio.Task] = set()
        self._write_lock = asyncio.Lock()

    @property
    def loaded(self) -> bool:
        """True once the remote document has been read successfully."""
        return self._loaded

    @property
    def pending_save(self) -> bool:
        """True while a debounced write is waiting for its timer."""
        return self._save_task is not None and not self._save_task.done()

    async def load(self) -> AppDocument:
        """Fetch the remote document and make it the current state.

        Never fails: an unreachable store or an unreadable document leaves an
        empty document in place. In that case nothing is persisted (an empty
        shell must not overwrite remote data) until a later load() succeeds,
        see retry_load().
        """
        try:
            raw = await self._store.fetch()
            document = parse_document(raw)
        except (DocumentStoreError, DocumentValidationError) as e:
            logger.warning(f"Starting from an empty document, remote state unavailable: {e}")
            self._document = self._replay(AppDocument.empty())
            return self._document

        if raw is None:
            logger.info("Remote store has no document yet, starting empty")

        replayed = bool(self._early_transforms)
        self._document = self._replay(document)
        self._early_transforms.clear()
        self._loaded = True
        logger.info(
            f"Loaded document: {len(self._document.users)} users, "
            f"{len(self._document.pending_users)} pending, "
            f"{len(self._document.media)} media, {len(self._document.posts)} posts"
        )

        if replayed:
            self._mark_dirty()
        return self._document

    async def retry_load(self, retry_seconds: float = 5.0, max_retry_seconds: float = 300.0) -> None:
        """Call load() again with exponential backoff until it succeeds.

        Run as a background task after a failed startup load. Changes made in
        the meantime are replayed over the loaded document and persisted.
        """
        delay = retry_seconds
        while not self._loaded:
            await asyncio.sleep(delay)
            logger.info("Retrying remote document load")
            await self.load()
            delay = min(delay * 2, max_retry_seconds)

    def _replay(self, document: AppDocument) -> AppDocument:
        for transform in self._early_transforms:
            try:
                document = transform(document)
            except Exception as e:
                logger.error(f"Dropping change made before load, it no longer applies: {e}", exc_info=True)
        return document

    def read(self, selector: Callable[[AppDocument], T] | None = None) -> AppDocument | T:
        """Return the current document, or a projection of it.

        Always reflects the latest update(), persisted or not.
        """
        if selector is None:
            return self._document
        return selector(self._document)

    def update(self, transform: Transform) -> AppDocument:
        """Apply a whole-document transform now and schedule a persist.

        Exceptions raised by the transform propagate and leave the state
        unchanged.
        """
        document = transform(self._document)
        if not isinstance(document, AppDocument):
            raise TypeError(f"transform must return an AppDocument, got {type(document).__name__}")
        self._document = document

        if not self._loaded:
            self._early_transforms.append(transform)
            return document

        self._mark_dirty()
        return document

    def _mark_dirty(self) -> None:
        self._dirty = True
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No event loop (sync caller); flush() will write it
            logger.debug("No running event loop, deferring save until flush()")
            return

        if self._save_task is not None and not self._save_task.done():
            self._save_task.cancel()
        self._save_task = loop.create_task(self._save_after_delay())
        self._save_tasks.add(self._save_task)
        self._save_task.add_done_callback(self._save_tasks.discard)

    async def _save_after_delay(self) -> None:
        await asyncio.sleep(self._debounce_seconds)
        # Past the window: a later update starts a new cycle rather than cancelling
        # this write. _save_tasks still holds the task while the PUT runs.
        self._save_task = None
        await self._persist()

    async def _persist(self) -> None:
        async with self._write_lock:
            if not self._dirty:
                return
            document = self._document
            self._dirty = False
            try:
                await self._store.save(document.to_json())
            except DocumentStoreError as e:
                logger.error(f"Document not saved, changes are kept in memory only: {e}")
                return
            logger.info("Document saved")

    async def flush(self) -> None:
        """Write pending changes now instead of waiting for the timer."""
        if self._save_task is not None and not self._save_task.done():
            self._save_task.cancel()
        self._save_task = None
        if self._loaded:
            await self._persist()
