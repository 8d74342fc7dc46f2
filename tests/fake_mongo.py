"""In-memory stand-in for a motor collection.

Implements only the operations and query operators the service issues.
"""
import copy
import re
from types import SimpleNamespace

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import WriteError

_MISSING = object()


def _resolve(doc, path):
    value = doc
    for key in path.split("."):
        if not isinstance(value, dict) or key not in value:
            return _MISSING
        value = value[key]
    return value


def _equals(value, expected):
    if value is _MISSING:
        return expected is None
    if isinstance(value, list) and not isinstance(expected, list):
        return expected in value
    return value == expected


def _compare(value, operand, op):
    if value is _MISSING or value is None:
        return False
    return op(value, operand)


def _matches_condition(value, condition):
    if not (isinstance(condition, dict) and condition and all(k.startswith("$") for k in condition)):
        return _equals(value, condition)

    for op, operand in condition.items():
        if op == "$in":
            ok = any(_equals(value, option) for option in operand)
        elif op == "$ne":
            ok = not _equals(value, operand)
        elif op == "$gt":
            ok = _compare(value, operand, lambda a, b: a > b)
        elif op == "$gte":
            ok = _compare(value, operand, lambda a, b: a >= b)
        elif op == "$lt":
            ok = _compare(value, operand, lambda a, b: a < b)
        elif op == "$lte":
            ok = _compare(value, operand, lambda a, b: a <= b)
        elif op == "$regex":
            flags = re.IGNORECASE if "i" in condition.get("$options", "") else 0
            ok = isinstance(value, str) and re.search(operand, value, flags) is not None
        elif op == "$options":
            continue
        else:
            raise NotImplementedError(op)
        if not ok:
            return False
    return True


def text_score(doc, search):
    terms = search.lower().split()
    haystack = " ".join([doc.get("title", ""), doc.get("description", ""), *doc.get("tags", [])]).lower()
    return float(sum(haystack.count(term) for term in terms))


def matches(doc, query):
    for key, condition in query.items():
        if key == "$or":
            if not any(matches(doc, sub) for sub in condition):
                return False
        elif key == "$text":
            if text_score(doc, condition["$search"]) == 0:
                return False
        elif not _matches_condition(_resolve(doc, key), condition):
            return False
    return True


def apply_update(doc, update):
    for op, fields in update.items():
        for path, value in fields.items():
            *parents, leaf = path.split(".")
            target = doc
            for key in parents:
                target = target.setdefault(key, {})
                if not isinstance(target, dict):
                    # Same refusal MongoDB gives for a path through null or a scalar
                    raise WriteError(f"Cannot create field '{leaf}' in element {{{key}: {target!r}}}", code=28)
            if op == "$set":
                target[leaf] = value
            elif op == "$inc":
                target[leaf] = target.get(leaf, 0) + value
            else:
                raise NotImplementedError(op)


def project(doc, projection, query=None):
    doc = copy.deepcopy(doc)
    included = [key for key, rule in (projection or {}).items() if rule == 1]
    if included:
        doc = {key: value for key, value in doc.items() if key == "_id" or key in included}
    for key, rule in (projection or {}).items():
        if rule == 0:
            doc.pop(key, None)
        elif isinstance(rule, dict) and rule.get("$meta") == "textScore":
            doc[key] = text_score(doc, query["$text"]["$search"])
    return doc


class FakeCursor:
    def __init__(self, documents):
        self._documents = documents
        self._skip = 0
        self._limit = 0

    def sort(self, key_or_list, direction=None):
        keys = [(key_or_list, direction)] if isinstance(key_or_list, str) else key_or_list
        for key, order in reversed(keys):
            if isinstance(order, dict):
                self._documents.sort(key=lambda d: d.get(key, 0), reverse=True)
            else:
                self._documents.sort(key=lambda d: _resolve(d, key), reverse=order == -1)
        return self

    def skip(self, count):
        self._skip = count
        return self

    def limit(self, count):
        self._limit = count
        return self

    def _window(self):
        documents = self._documents[self._skip:]
        return documents[:self._limit] if self._limit else documents

    async def to_list(self, length=None):
        documents = self._window()
        return documents[:length] if length else documents

    async def _iterate(self):
        for doc in self._window():
            yield doc

    def __aiter__(self):
        return self._iterate()


class FakeCollection:
    def __init__(self, documents=()):
        self.documents = [copy.deepcopy(doc) for doc in documents]

    def _first(self, query):
        return next((doc for doc in self.documents if matches(doc, query)), None)

    async def find_one(self, query, projection=None):
        doc = self._first(query)
        return project(doc, projection) if doc is not None else None

    def find(self, query=None, projection=None):
        query = query or {}
        return FakeCursor([project(doc, projection, query) for doc in self.documents if matches(doc, query)])

    async def count_documents(self, query):
        return sum(1 for doc in self.documents if matches(doc, query))

    async def insert_one(self, doc):
        doc.setdefault("_id", ObjectId())
        self.documents.append(copy.deepcopy(doc))
        return SimpleNamespace(inserted_id=doc["_id"])

    async def update_one(self, query, update):
        doc = self._first(query)
        if doc is None:
            return SimpleNamespace(matched_count=0, modified_count=0)
        apply_update(doc, update)
        return SimpleNamespace(matched_count=1, modified_count=1)

    async def find_one_and_update(self, query, update, projection=None, return_document=ReturnDocument.BEFORE):
        doc = self._first(query)
        if doc is None:
            return None
        before = project(doc, projection)
        apply_update(doc, update)
        return project(doc, projection) if return_document == ReturnDocument.AFTER else before

    async def delete_one(self, query):
        doc = self._first(query)
        if doc is None:
            return SimpleNamespace(deleted_count=0)
        self.documents.remove(doc)
        return SimpleNamespace(deleted_count=1)

    def get(self, doc_id):
        return next(doc for doc in self.documents if doc["_id"] == doc_id)
