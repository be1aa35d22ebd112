from datetime import datetime, timezone
from typing import List, Tuple, Union


def now() -> str:
    return datetime.now(timezone.utc).isoformat()


def split_csv(value: Union[str, List[str], None]) -> List[str]:
    """Split a comma separated string into a list of trimmed, non-empty items."""
    if value is None:
        return []
    if isinstance(value, (list, tuple, set)):
        return [str(v).strip() for v in value if str(v).strip()]
    return [v.strip() for v in str(value).split(",") if v.strip()]


def meta_namespace_key(namespace: str, name: str) -> str:
    """Build a work queue key for a namespaced object."""
    if namespace:
        return f"{namespace}/{name}"
    return name


def split_meta_namespace_key(key: str) -> Tuple[str, str]:
    """Split a ``namespace/name`` key into its parts.

    Cluster scoped keys (no slash) return an empty namespace.

    Raises:
        ValueError: If the key is malformed
    """
    if not isinstance(key, str) or not key:
        raise ValueError(f"invalid resource key: {key!r}")
    parts = key.split("/")
    if len(parts) == 1:
        return "", parts[0]
    if len(parts) == 2 and parts[0] and parts[1]:
        return parts[0], parts[1]
    raise ValueError(f"invalid resource key: {key!r}")
