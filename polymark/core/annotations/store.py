"""
Page-partitioned store of committed annotations.
"""
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from polymark.core.annotations.models import Annotation
from polymark.core.errors import MalformedAnnotation

logger = logging.getLogger(__name__)

ChangeListener = Callable[[Optional[int]], None]


class AnnotationStore:
    """
    Single source of truth for annotation lifetime.

    Every mutation notifies subscribed listeners once with the page number
    that changed, so the canvas and the annotation counter can re-read.
    """

    def __init__(self):
        self._pages: Dict[int, List[Annotation]] = {}
        self._listeners: List[ChangeListener] = []

    # Change notification

    def subscribe(self, listener: ChangeListener) -> None:
        """
        Register a change listener.

        Args:
            listener: Called with the changed page, or None after clear()
        """
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: ChangeListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, page: Optional[int]) -> None:
        for listener in list(self._listeners):
            listener(page)

    # Queries

    def by_page(self, page: int) -> List[Annotation]:
        """
        Get annotations for a page in insertion order.

        Args:
            page: 1-based page number

        Returns:
            A copy of the page's list
        """
        return list(self._pages.get(page, []))

    def get(self, page: int, annotation_id: str) -> Optional[Annotation]:
        for ann in self._pages.get(page, []):
            if ann.id == annotation_id:
                return ann
        return None

    def all_annotations(self) -> Dict[int, List[Annotation]]:
        """Snapshot of every non-empty page, ordered by page number."""
        return {
            page: list(anns)
            for page, anns in sorted(self._pages.items())
            if anns
        }

    def pages(self) -> List[int]:
        return sorted(page for page, anns in self._pages.items() if anns)

    def count(self, page: Optional[int] = None) -> int:
        """Number of annotations on ``page``, or in total when page is None."""
        if page is not None:
            return len(self._pages.get(page, []))
        return sum(len(anns) for anns in self._pages.values())

    def next_id(self, page: int) -> str:
        """
        Produce an id that is unused on ``page``.

        Returns:
            An id of the form ``"{page}-{n}"``
        """
        existing = {ann.id for ann in self._pages.get(page, [])}
        n = len(existing)
        while f"{page}-{n}" in existing:
            n += 1
        return f"{page}-{n}"

    # Mutations

    def upsert_page(self, page: int, annotations: Sequence[Annotation]) -> None:
        """
        Replace every annotation on ``page`` at once.

        Args:
            page: 1-based page number
            annotations: The page's complete new list
        """
        annotations = list(annotations)
        self._validate(page, annotations)
        self._pages[page] = annotations
        self._notify(page)

    def add(self, annotation: Annotation) -> None:
        """Append one annotation to its page."""
        if not isinstance(annotation, Annotation):
            raise TypeError(
                f"Store only accepts Annotation objects, got {type(annotation).__name__}"
            )
        current = self._pages.get(annotation.page, [])
        self._validate(annotation.page, current + [annotation])
        self._pages[annotation.page] = current + [annotation]
        self._notify(annotation.page)

    def remove(self, page: int, ids: Iterable[str]) -> int:
        """
        Remove annotations by id.

        Args:
            page: Page the ids belong to
            ids: Ids to remove; unknown ids are ignored

        Returns:
            Number of annotations removed
        """
        ids = set(ids)
        current = self._pages.get(page, [])
        kept = [ann for ann in current if ann.id not in ids]
        removed = len(current) - len(kept)
        if removed:
            self._pages[page] = kept
            self._notify(page)
        return removed

    def update(self, page: int, annotations: Iterable[Annotation]) -> int:
        """
        Replace existing annotations by id, keeping their position.

        Returns:
            Number of annotations updated
        """
        replacements = {ann.id: ann for ann in annotations}
        current = self._pages.get(page, [])
        updated = [replacements.get(ann.id, ann) for ann in current]
        self._validate(page, updated)

        count = sum(1 for ann in current if ann.id in replacements)
        if count:
            self._pages[page] = updated
            self._notify(page)
        return count

    def replace(
        self, page: int, remove_ids: Iterable[str], additions: Sequence[Annotation]
    ) -> None:
        """
        Remove ``remove_ids`` and append ``additions`` as one change.

        Observers never see a state where both old and new shapes exist.
        """
        remove_ids = set(remove_ids)
        kept = [ann for ann in self._pages.get(page, []) if ann.id not in remove_ids]
        result = kept + list(additions)
        self._validate(page, result)
        self._pages[page] = result
        self._notify(page)

    def clear(self) -> None:
        self._pages.clear()
        self._notify(None)

    def load(self, records: Iterable[Dict[str, Any]]) -> int:
        """
        Load annotation records from an external source.

        Malformed records are logged and skipped; the rest of the page and
        every other page still load.

        Args:
            records: Dictionaries in ``Annotation.to_dict()`` form

        Returns:
            Number of annotations loaded
        """
        by_page: Dict[int, List[Annotation]] = {}
        skipped = 0
        for record in records:
            try:
                ann = Annotation.from_dict(record)
            except MalformedAnnotation as e:
                skipped += 1
                logger.warning(f"Skipping malformed annotation: {e}")
                continue

            page_list = by_page.setdefault(ann.page, [])
            taken = {a.id for a in page_list} | {a.id for a in self._pages.get(ann.page, [])}
            if ann.id in taken:
                skipped += 1
                logger.warning(f"Skipping annotation with duplicate id {ann.id!r} on page {ann.page}")
                continue
            page_list.append(ann)

        loaded = 0
        for page, anns in by_page.items():
            self._pages[page] = self._pages.get(page, []) + anns
            loaded += len(anns)
            self._notify(page)

        if skipped:
            logger.info(f"Loaded {loaded} annotation(s), skipped {skipped}")
        return loaded

    @staticmethod
    def _validate(page: int, annotations: Sequence[Annotation]) -> None:
        seen = set()
        for ann in annotations:
            if not isinstance(ann, Annotation):
                raise TypeError(
                    f"Store only accepts Annotation objects, got {type(ann).__name__}"
                )
            if ann.page != page:
                raise ValueError(f"Annotation {ann.id!r} belongs to page {ann.page}, not {page}")
            if ann.id in seen:
                raise ValueError(f"Duplicate annotation id {ann.id!r} on page {page}")
            seen.add(ann.id)
