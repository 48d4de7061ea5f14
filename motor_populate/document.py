"""Documents that remember which of their paths have been populated."""
from collections.abc import Mapping

from .common import get_value, set_value

__all__ = ['Document', 'depopulate', 'is_populated']


class Document(dict):
    """A raw MongoDB document with populate tracking.

    Before the population engine overwrites a reference with the documents
    it points at, it records the raw value here, so that
    :meth:`depopulate` can put it back exactly.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._populated = {}

    def populated(self, path):
        """Return the raw value `path` held before it was populated."""
        return self._populated.get(path)

    def mark_populated(self, path, raw_value):
        if isinstance(raw_value, list):
            raw_value = list(raw_value)
        self._populated[path] = raw_value

    def is_tracked(self, path):
        return path in self._populated

    def depopulate(self, path=None):
        """Restore the raw value of `path`, or of every populated path."""
        if path is None:
            for tracked, raw_value in self._populated.items():
                set_value(self, tracked, raw_value)
            self._populated.clear()
        elif path in self._populated:
            set_value(self, path, self._populated.pop(path))
        return self

    def is_populated(self, path):
        return is_populated(self, path)

    def copy(self):
        clone = type(self)(self)
        clone._populated = dict(self._populated)
        return clone

    def __repr__(self):
        return 'Document(%s)' % dict.__repr__(self)


def _looks_like_record(value):
    return isinstance(value, Mapping)


def is_populated(document, path):
    """Tell whether `path` on `document` holds populated documents.

    The document's own tracking is authoritative. Without it, a path counts
    as populated when it holds a document or a non-empty list of documents.
    """
    if isinstance(document, Document) and document.is_tracked(path):
        return True
    value = get_value(document, path)
    if isinstance(value, list):
        return bool(value) and _looks_like_record(value[0])
    return _looks_like_record(value)


def depopulate(documents, path=None):
    """Restore raw reference values on one or many documents.

    Only paths recorded by the population engine are restored; plain
    mappings carry no tracking and are left unchanged.
    """
    if documents is None:
        return documents
    items = documents if isinstance(documents, (list, tuple)) else [documents]
    for document in items:
        if isinstance(document, Document):
            document.depopulate(path)
    return documents
