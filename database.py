"""
MongoDB document store.

Every write runs the collection's pydantic schema first (see schemas.py), so
the storage engine can be swapped without losing validation. Each call
commits on its own: there are no multi-document transactions.
"""

import logging
from typing import Any, Dict, Iterator, Optional

from bson import ObjectId
from pydantic import ValidationError as PydanticValidationError
from pymongo import MongoClient, ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from errors import NotFoundError, UnknownError, ValidationError
from schemas import COLLECTIONS, HIDDEN_FIELDS, UNIQUE_FIELDS
from settings import Settings

logger = logging.getLogger(__name__)


def connect(settings: Settings) -> Database:
    client = MongoClient(settings.DATABASE_URL)
    return client[settings.DATABASE_NAME]


def new_id() -> str:
    return str(ObjectId())


class Document(dict):
    """A stored document as a plain dict, tagged with the collection it came from."""

    def __init__(self, kind: str, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.kind = kind


def _field_errors(exc: PydanticValidationError):
    errors = []
    for err in exc.errors():
        field = ".".join(str(p) for p in err["loc"]) or "document"
        if err["type"] == "missing":
            message = f"Please provide {field}"
        else:
            message = err["msg"].replace("Value error, ", "")
        errors.append({"field": field, "message": message})
    return errors


def validate(kind: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    """Run the collection schema; omitted or None fields fall back to their defaults."""
    schema = COLLECTIONS[kind]
    data = {k: v for k, v in fields.items() if v is not None and k not in ("id", "_id")}
    try:
        return schema.model_validate(data).model_dump()
    except PydanticValidationError as e:
        raise ValidationError(_field_errors(e)) from e


class DocumentCursor:
    """
    Lazy view over every document of one kind. Each iteration runs a fresh
    query, so the same cursor can be walked more than once.

    `expand` maps a reference field to the kind it points at; the id is
    replaced by the embedded document, or None when unset or dangling.
    """

    def __init__(self, store: "DocumentStore", kind: str, filters: Dict[str, Any], expand: Dict[str, str]):
        self.store = store
        self.kind = kind
        self.filters = filters
        self.expand = expand

    def __iter__(self) -> Iterator[Document]:
        coll = self.store.collection(self.kind)
        for raw in coll.find(self.filters, self.store.projection(self.kind)):
            yield self.store.expand(self.store.to_document(self.kind, raw), self.expand)


class DocumentStore:
    def __init__(self, database: Database):
        self.db = database
        self.indexed = False

    def collection(self, kind: str):
        if kind not in COLLECTIONS:
            raise UnknownError(f"Unknown collection: {kind}")
        return self.db[kind]

    def ensure_indexes(self):
        """Create the unique indexes; runs on its own before the first write if nobody called it."""
        for kind, fields in UNIQUE_FIELDS.items():
            for field in fields:
                self.collection(kind).create_index(field, unique=True)
                logger.info(f"Unique index ready on {kind}.{field}")
        self.indexed = True

    def projection(self, kind: str, include_hidden: bool = False) -> Optional[Dict[str, int]]:
        hidden = HIDDEN_FIELDS.get(kind)
        if include_hidden or not hidden:
            return None
        return {f: 0 for f in hidden}

    def to_document(self, kind: str, raw: Dict[str, Any], include_hidden: bool = False) -> Document:
        doc = Document(kind, id=raw["_id"])
        hidden = set() if include_hidden else HIDDEN_FIELDS.get(kind, set())
        for key, value in raw.items():
            if key != "_id" and key not in hidden:
                doc[key] = value
        return doc

    def _duplicate(self, kind: str, raw: Dict[str, Any], exc: DuplicateKeyError) -> ValidationError:
        details = getattr(exc, "details", None) or {}
        key = details.get("keyValue") or details.get("keyPattern") or {}
        coll = self.collection(kind)
        for field in UNIQUE_FIELDS.get(kind, []):
            taken = coll.find_one({field: raw.get(field), "_id": {"$ne": raw["_id"]}})
            if field in key or taken is not None:
                return ValidationError([{"field": field, "message": f"{field} already exists"}])
        return ValidationError([{"field": "document", "message": "Duplicate value"}])

    # ---------- operations ----------

    def create(self, kind: str, fields: Dict[str, Any]) -> Document:
        if not self.indexed:
            self.ensure_indexes()
        coll = self.collection(kind)
        raw = {"_id": new_id(), **validate(kind, fields)}
        try:
            coll.insert_one(raw)
        except DuplicateKeyError as e:
            raise self._duplicate(kind, raw, e) from e
        logger.debug(f"Created {kind} {raw['_id']}")
        return self.to_document(kind, raw)

    def expand(self, doc: Document, expand: Optional[Dict[str, str]]) -> Document:
        """Replace each reference field named in `expand` with its document, or None when unset or dangling."""
        for field, target in (expand or {}).items():
            ref = doc.get(field)
            doc[field] = self.find_by_id(target, ref) if ref else None
        return doc

    def find_by_id(
        self, kind: str, doc_id: Any, include_hidden: bool = False, expand: Optional[Dict[str, str]] = None
    ) -> Optional[Document]:
        """Return the document or None; malformed ids are simply not found."""
        if not isinstance(doc_id, str) or not doc_id:
            return None
        raw = self.collection(kind).find_one({"_id": doc_id}, self.projection(kind, include_hidden))
        if raw is None:
            return None
        return self.expand(self.to_document(kind, raw, include_hidden), expand)

    def find_one(self, kind: str, include_hidden: bool = False, **filters) -> Optional[Document]:
        raw = self.collection(kind).find_one(filters, self.projection(kind, include_hidden))
        if raw is None:
            return None
        return self.to_document(kind, raw, include_hidden)

    def find_all(self, kind: str, expand: Optional[Dict[str, str]] = None, **filters) -> DocumentCursor:
        self.collection(kind)
        for target in (expand or {}).values():
            self.collection(target)
        return DocumentCursor(self, kind, filters, dict(expand or {}))

    def save(self, document: Document) -> Document:
        """
        Persist changes to an existing document. Fields hidden on read are
        kept from the stored copy, and the merged result is validated again.
        """
        kind = document.kind
        doc_id = document.get("id")
        if not self.indexed:
            self.ensure_indexes()
        coll = self.collection(kind)
        stored = coll.find_one({"_id": doc_id}) if isinstance(doc_id, str) else None
        if stored is None:
            raise NotFoundError(kind, doc_id)
        merged = {**stored, **document}
        raw = {"_id": doc_id, **validate(kind, merged)}
        try:
            result = coll.replace_one({"_id": doc_id}, raw)
        except DuplicateKeyError as e:
            raise self._duplicate(kind, raw, e) from e
        if result.matched_count == 0:
            raise NotFoundError(kind, doc_id)
        return self.to_document(kind, raw)

    def add_to_set(self, kind: str, doc_id: Any, field: str, value: str) -> Document:
        """Append `value` to a list field unless already present, in one atomic update."""
        schema = COLLECTIONS.get(kind)
        if schema is None or field not in schema.model_fields:
            raise UnknownError(f"Unknown field {field} on {kind}")
        if not isinstance(value, str) or not value:
            raise ValidationError([{"field": field, "message": "Reference must be a non-empty id"}])
        if not isinstance(doc_id, str) or not doc_id:
            raise NotFoundError(kind, doc_id)
        raw = self.collection(kind).find_one_and_update(
            {"_id": doc_id},
            {"$addToSet": {field: value}},
            projection=self.projection(kind),
            return_document=ReturnDocument.AFTER,
        )
        if raw is None:
            raise NotFoundError(kind, doc_id)
        return self.to_document(kind, raw)
