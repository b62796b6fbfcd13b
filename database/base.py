from typing import Any, Dict
from sqlalchemy import inspect
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def row_to_dict(obj) -> Dict[str, Any]:
    """Map an ORM instance to a plain dict keyed by attribute name."""
    return {attr.key: getattr(obj, attr.key) for attr in inspect(obj).mapper.column_attrs}
