from sqlalchemy.orm import Session
from typing import Callable, Type, TypeVar, Any, Optional

T = TypeVar("T")

def get_object_or_none(db: Session, model: Type[T], obj_id: Any) -> Optional[T]:
    return db.query(model).filter(model.id == obj_id).first()

def get_object_or_404(db: Session, model: Type[T], obj_id: Any, raise_missing: Callable[[], None]) -> T:
    """
    Retrieves an object by ID or calls the given raise_* helper.
    """
    obj = get_object_or_none(db, model, obj_id)
    if not obj:
        raise_missing()
    return obj

def apply_updates(obj: Any, updates: dict) -> dict:
    """
    Sets changed attributes on an ORM object.
    Returns {field: {"old": ..., "new": ...}} for the fields that actually changed.
    """
    changes = {}
    for field, value in updates.items():
        old = getattr(obj, field)
        if old != value:
            setattr(obj, field, value)
            changes[field] = {"old": old, "new": value}
    return changes
