"""
Sparse merge of profile and preference updates.

An update model only carries the fields the client sent (pydantic tracks them
in ``model_fields_set``). Nested models are flattened to dotted paths so that
``{"notifications": {"push": true}}`` sets ``preferences.notifications.push``
and leaves ``preferences.notifications.email`` alone.
"""
import copy

from pydantic import BaseModel

from models.user_profile import Preferences, PreferencesUpdate, ProfileUpdate, UserProfile


def flatten_update(update: BaseModel, prefix: str = "") -> dict:
    """Build a dotted-path ``$set`` document from the fields present in ``update``."""
    fields = {}
    for name in update.model_fields_set:
        value = getattr(update, name)
        path = f"{prefix}{name}"
        if isinstance(value, BaseModel):
            fields.update(flatten_update(value, f"{path}."))
        else:
            fields[path] = value
    return fields


def apply_dotted_update(record: dict, updates: dict) -> dict:
    """Return a copy of ``record`` with each dotted path in ``updates`` assigned."""
    merged = copy.deepcopy(record)
    for path, value in updates.items():
        *parents, leaf = path.split(".")
        target = merged
        for key in parents:
            child = target.get(key)
            if not isinstance(child, dict):
                child = {}
                target[key] = child
            target = child
        target[leaf] = value
    return merged


def _scalar_parent(record: dict, path: str):
    """Shortest prefix of ``path`` stored as something other than a sub-document."""
    parts = path.split(".")
    target = record
    for depth, key in enumerate(parts[:-1], start=1):
        if key not in target:
            return None
        target = target[key]
        if not isinstance(target, dict):
            return ".".join(parts[:depth])
    return None


def _value_at(record: dict, path: str):
    for key in path.split("."):
        record = record[key]
    return record


def anchor_updates(record: dict, updates: dict, merged: dict) -> dict:
    """
    Rewrite dotted paths whose stored parent is null or a scalar.

    MongoDB refuses ``$set`` of ``preferences.theme`` while ``preferences`` is
    null, so such parents are set whole from the merged record instead.
    """
    anchored = {}
    for path, value in updates.items():
        parent = _scalar_parent(record, path)
        if parent is None:
            anchored[path] = value
        else:
            anchored[parent] = _value_at(merged, parent)
    return anchored


def _profile_fields(record: dict) -> dict:
    return {name: record[name] for name in UserProfile.model_fields if name in record}


def merge_profile_update(user: dict, update: ProfileUpdate) -> dict:
    """
    Merge a profile update into a stored user.

    Returns the ``$set`` document. Raises pydantic ``ValidationError`` if the
    merged record violates the profile constraints, in which case nothing
    should be written.
    """
    updates = flatten_update(update)
    merged = apply_dotted_update(user, updates)
    UserProfile.model_validate(_profile_fields(merged))
    return anchor_updates(user, updates, merged)


def merge_preferences_update(user: dict, update: PreferencesUpdate) -> dict:
    """Merge a preferences update; same contract as :func:`merge_profile_update`."""
    updates = flatten_update(update, "preferences.")
    merged = apply_dotted_update(user, updates)
    Preferences.model_validate(merged.get("preferences") or {})
    return anchor_updates(user, updates, merged)
