"""Async population of references between documents."""
import logging
from collections.abc import Mapping

from .common import canonical_id, get_value, set_value, validate_boolean
from .document import Document
from .errors import FetchFailure, ModelNotFound, UnresolvedReference
from .options import normalize_populate, select_to_projection
from .resolver import UNRESOLVED, VIRTUAL, resolve_reference

__all__ = ['populate', 'assign_populated', 'canonical_id',
           'FetchCache', 'CircularGuard', 'PopulationSession']

logger = logging.getLogger(__name__)


class FetchCache(object):
    """Documents fetched during one populate call.

    Maps collection name --> canonical id --> document.
    """

    def __init__(self):
        self._collections = {}

    def get(self, collection, key, default=None):
        return self._collections.get(collection, {}).get(key, default)

    def missing(self, collection, keys):
        """Return the keys in `keys` that are not cached for `collection`."""
        cached = self._collections.get(collection, {})
        return [key for key in keys if key not in cached]

    def add(self, collection, records):
        cached = self._collections.setdefault(collection, {})
        for record in records:
            if not isinstance(record, Mapping):
                continue
            key = canonical_id(record.get('_id'))
            if key is not None:
                cached[key] = record

    def __len__(self):
        return sum(len(cached) for cached in self._collections.values())


class CircularGuard(object):
    """Paths currently being populated, keyed by path name."""

    def __init__(self):
        self._active = set()

    def enter(self, path):
        """Mark `path` active. Returns ``False`` if it already was."""
        if path in self._active:
            return False
        self._active.add(path)
        return True

    def exit(self, path):
        self._active.discard(path)

    def is_active(self, path):
        return path in self._active


class PopulationSession(object):
    """State shared by every path resolved during one populate call."""

    def __init__(self, registry, root_documents=(), strict=False,
                 session=None):
        self.registry = registry
        self.root_documents = list(root_documents)
        self.strict = strict
        self.session = session
        self.cache = FetchCache()
        self.guard = CircularGuard()

    def is_strict(self, request):
        if request.strict is None:
            return self.strict
        return request.strict


async def populate(documents, paths, schema=None, registry=None,
                   strict=False, session=None):
    """Replace references on `documents` with the documents they point at.

    References found on all `documents` are fetched together: one query per
    populated path, and a document already fetched during this call is never
    fetched again.

    :parameters:
      - `documents`: A document or a list of documents (mappings). They are
        modified in place.
      - `paths`: What to populate. A path name, several path names
        separated by spaces, a mapping of
        :class:`~motor_populate.options.PopulateOptions` arguments, or a
        list of any of those.
      - `schema`: Reference metadata for `documents`, exposing
        ``path_info(name)`` and ``virtual_info(name)``.
      - `registry`: The :class:`~motor_populate.models.ModelRegistry`
        used to look up referenced models.
      - `strict`: If ``True``, paths that cannot be resolved raise
        :class:`~motor_populate.errors.UnresolvedReference` or
        :class:`~motor_populate.errors.ModelNotFound` instead of being
        skipped. Individual requests may override this.
      - `session`: An optional driver session passed to every query.

    :returns: `documents`.

    """
    strict = validate_boolean('strict', strict)
    if registry is None:
        raise TypeError('populate() requires a model registry.')
    if not documents:
        return documents
    if isinstance(documents, (list, tuple)):
        docs = list(documents)
    else:
        docs = [documents]

    requests = normalize_populate(paths)
    if not requests:
        return documents

    population = PopulationSession(registry, docs, strict, session)
    logger.debug('Populating %d path(s) on %d document(s).',
                 len(requests), len(docs))
    for request in requests:
        if request.skip:
            continue
        await _populate_path(docs, request, schema, population)
    return documents


async def _populate_path(documents, request, schema, population):
    path = request.path
    if not population.guard.enter(path):
        logger.warning(
            'Circular population detected for path %r, skipping it '
            '(%d root document(s)).', path, len(population.root_documents))
        return
    try:
        try:
            descriptor, model = _resolve(request, schema, population)
        except (UnresolvedReference, ModelNotFound) as exc:
            if population.is_strict(request):
                raise
            logger.warning('%s Skipping it.', exc.message)
            return

        if descriptor.kind == VIRTUAL:
            await _populate_virtual(
                documents, descriptor, request, model, population)
        else:
            await _populate_direct(
                documents, descriptor, request, model, population)

        nested = request.nested()
        if nested:
            await _populate_nested(documents, path, nested, model, population)
    finally:
        population.guard.exit(path)


def _resolve(request, schema, population):
    path = request.path
    descriptor = resolve_reference(path, request, schema)
    if descriptor.kind == UNRESOLVED:
        raise UnresolvedReference(
            'Cannot populate path %r: no reference found in schema.' % path,
            path)
    model = population.registry.lookup(descriptor.target_collection)
    if model is None:
        raise ModelNotFound(
            'Model %r not found for population of path %r.'
            % (descriptor.target_collection, path),
            path, descriptor.target_collection)
    return descriptor, model


def _is_inclusive(projection):
    flags = [flag for name, flag in projection.items() if name != '_id']
    if flags:
        return any(flags)
    return bool(projection.get('_id', 0))


def _require_field(projection, field):
    """Return `projection` adjusted so that `field` is always returned."""
    if not projection:
        return projection
    projection = dict(projection)
    if _is_inclusive(projection):
        projection[field] = 1
    elif not projection.get(field, 1):
        del projection[field]
    return projection or None


async def _query(model, query, projection, request, population):
    kwargs = dict(request.options or {})
    if population.session is not None:
        kwargs['session'] = population.session
    try:
        return list(await model.find(query, projection, **kwargs))
    except Exception as exc:
        raise FetchFailure(
            'Error populating path %r: %s' % (request.path, exc),
            request.path) from exc


async def _fetch(model, query, projection, request, population):
    try:
        return await _query(model, query, projection, request, population)
    except FetchFailure as exc:
        logger.warning('%s No documents were fetched for it.', exc.message,
                       exc_info=True)
        return []


def _reference_id(value):
    # Values that are already documents refer to their own _id.
    if isinstance(value, Mapping):
        return value.get('_id')
    return value


def _raw_reference(document, path):
    if isinstance(document, Document) and document.is_tracked(path):
        return document.populated(path)
    return get_value(document, path)


def _add_raw_form(raw_ids, key, value):
    # Equal ids may be stored in several forms (ObjectId, hex string).
    forms = raw_ids.setdefault(key, [])
    if value not in forms:
        forms.append(value)


def _collect_references(documents, path, is_array):
    """Read the references stored at `path` on every document.

    Returns a list of ``(document, raw value, canonical ids, is_array)`` and
    a map of canonical id --> distinct raw ids seen for it.
    """
    pending = []
    raw_ids = {}
    for document in documents:
        raw_value = _raw_reference(document, path)
        if raw_value is None:
            continue
        if isinstance(raw_value, (list, tuple)):
            values = raw_value
        else:
            values = [raw_value]
        keys = []
        for value in values:
            ref_id = _reference_id(value)
            key = canonical_id(ref_id)
            if key is None:
                continue
            _add_raw_form(raw_ids, key, ref_id)
            keys.append(key)
        doc_is_array = is_array
        if doc_is_array is None:
            doc_is_array = isinstance(raw_value, (list, tuple))
        pending.append((document, raw_value, keys, doc_is_array))
    return pending, raw_ids


def _shape(records, just_one, limit):
    if limit:
        records = records[:limit]
    if just_one:
        return records[0] if records else None
    return records


def _transform(records, transform):
    if transform is None:
        return records
    transformed = []
    for record in records:
        record = transform(record)
        if record is not None:
            transformed.append(record)
    return transformed


def _without_id(record):
    record = type(record)(record)
    record.pop('_id', None)
    return record


def _assign_references(pending, path, lookup, transform, just_one, limit):
    for document, raw_value, keys, is_array in pending:
        records = [lookup(key) for key in keys]
        records = _transform([r for r in records if r is not None],
                             transform)
        if isinstance(document, Document) and not document.is_tracked(path):
            document.mark_populated(path, raw_value)
        doc_just_one = just_one
        if doc_just_one is None:
            doc_just_one = not is_array
        set_value(document, path, _shape(records, doc_just_one, limit))


async def _populate_direct(documents, descriptor, request, model,
                           population):
    path = descriptor.path
    collection = descriptor.target_collection
    pending, raw_ids = _collect_references(
        documents, path, descriptor.is_array)
    if not pending:
        return

    # The cache is keyed by _id, so it is fetched even when not selected.
    projection = select_to_projection(request.select)
    hide_id = bool(projection) and not projection.get('_id', 1)
    uncached = population.cache.missing(collection, raw_ids)
    if uncached:
        query = {'_id': {'$in': [raw_id for key in uncached
                                 for raw_id in raw_ids[key]]}}
        if request.match:
            query.update(request.match)
        logger.debug('Fetching %d document(s) from %r for path %r.',
                     len(uncached), collection, path)
        records = await _fetch(model, query,
                               _require_field(projection, '_id'),
                               request, population)
        population.cache.add(collection, records)

    def lookup(key):
        record = population.cache.get(collection, key)
        if hide_id and record is not None:
            return _without_id(record)
        return record

    _assign_references(
        pending, path, lookup,
        request.transform, descriptor.just_one, request.per_document_limit)


async def _populate_virtual(documents, descriptor, request, model,
                            population):
    local_values = {}
    pending = []
    for document in documents:
        value = get_value(document, descriptor.local_field)
        key = canonical_id(value)
        if key is None:
            continue
        _add_raw_form(local_values, key, value)
        pending.append((document, key))
    if not pending:
        return

    foreign_field = descriptor.foreign_field
    query = {foreign_field: {'$in': [value for forms in local_values.values()
                                     for value in forms]}}
    if request.match:
        query.update(request.match)
    projection = _require_field(
        select_to_projection(request.select), foreign_field)
    logger.debug('Fetching documents from %r where %r matches %d value(s) '
                 'for virtual path %r.', descriptor.target_collection,
                 foreign_field, len(local_values), descriptor.path)
    records = await _fetch(model, query, projection, request, population)

    # Foreign value --> documents. Array values join on each element.
    groups = {}
    for record in records:
        foreign_value = get_value(record, foreign_field)
        if isinstance(foreign_value, (list, tuple)):
            values = foreign_value
        else:
            values = [foreign_value]
        seen = set()
        for value in values:
            key = canonical_id(value)
            if key is None or key in seen:
                continue
            seen.add(key)
            groups.setdefault(key, []).append(record)

    for document, key in pending:
        matched = list(groups.get(key, ()))
        # Every match is kept, even when the transform maps it to None.
        if request.transform is not None:
            matched = [request.transform(record) for record in matched]
        set_value(document, descriptor.path,
                  _shape(matched, descriptor.just_one,
                         request.per_document_limit))


async def _populate_nested(documents, path, requests, model, population):
    children = []
    seen = set()
    for document in documents:
        value = get_value(document, path)
        values = value if isinstance(value, list) else [value]
        for child in values:
            if isinstance(child, Mapping) and id(child) not in seen:
                seen.add(id(child))
                children.append(child)
    if not children:
        return

    schema = getattr(model, 'schema', None)
    for request in requests:
        if request.skip:
            continue
        await _populate_path(children, request, schema, population)


def assign_populated(documents, path, fetched, is_array=False,
                     just_one=None):
    """Assign documents fetched by the caller onto `documents`.

    :parameters:
      - `documents`: The documents holding references at `path`.
      - `path`: The path to assign at.
      - `fetched`: A mapping of id --> fetched document. Ids may be given in
        any form accepted by :func:`~motor_populate.common.canonical_id`.
      - `is_array`: Whether `path` holds a list of references.
      - `just_one`: Force a single document (``True``) or a list
        (``False``).

    """
    lookup = {canonical_id(key): value for key, value in fetched.items()}
    if not isinstance(documents, (list, tuple)):
        documents = [documents]
    pending, _ = _collect_references(documents, path, is_array)
    _assign_references(pending, path, lookup.get, None, just_one, None)
