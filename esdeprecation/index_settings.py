"""
Index settings that are inspected by the deprecation checks.

Settings are read from the flat, dotted representation of the index settings
(as returned by GET /<index>/_settings?flat_settings=true). A Setting knows its key,
its default value and how to parse the stored (string) value.
"""

from typing import Any, Callable, Generic, Mapping, TypeVar

T = TypeVar("T")


class SettingValueError(ValueError):
    """The stored value of a setting cannot be parsed"""


def parse_str(value: Any) -> str:
    return str(value)


def parse_bool(value: Any) -> bool:
    # Elasticsearch only accepts the literal strings true and false
    if isinstance(value, bool):
        return value
    if value == "true":
        return True
    if value == "false":
        return False
    raise SettingValueError(f"Failed to parse value [{value}] as only [true] or [false] are allowed.")


def parse_int(value: Any) -> int:
    if isinstance(value, bool):
        raise SettingValueError(f"Failed to parse value [{value}] as an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise SettingValueError(f"Failed to parse value [{value}] as an integer")


def parse_list(value: Any) -> list[str]:
    if isinstance(value, str):
        return [v.strip() for v in value.split(",") if v.strip()]
    return [str(v) for v in value]


class Setting(Generic[T]):
    def __init__(self, key: str, default: T, parser: Callable[[Any], T]):
        self.key = key
        self.default = default
        self.parser = parser

    def exists(self, settings: Mapping[str, Any]) -> bool:
        """Is this setting explicitly set (regardless of its value)?"""
        return self.key in settings

    def get(self, settings: Mapping[str, Any]) -> T:
        """Return the parsed value of this setting, or the default if it is not set"""
        if self.key not in settings:
            return self.default
        return self.parser(settings[self.key])

    def __repr__(self):
        return f"Setting({self.key!r})"


def flatten_settings(settings: Mapping[str, Any], prefix: str = "") -> dict[str, Any]:
    """
    Convert nested settings ({"index": {"number_of_shards": "1"}}) to flat, dotted keys
    ({"index.number_of_shards": "1"}). Settings that are already flat are returned as is.
    """
    result: dict[str, Any] = {}
    for key, value in settings.items():
        if isinstance(value, Mapping):
            result.update(flatten_settings(value, prefix=f"{prefix}{key}."))
        else:
            result[f"{prefix}{key}"] = value
    return result


DEFAULT_FIELD_SETTING = Setting("index.query.default_field", ["*"], parse_list)
INDEX_SOFT_DELETES_SETTING = Setting("index.soft_deletes.enabled", True, parse_bool)
INDEX_TRANSLOG_RETENTION_SIZE_SETTING = Setting("index.translog.retention.size", "-1", parse_str)
INDEX_TRANSLOG_RETENTION_AGE_SETTING = Setting("index.translog.retention.age", "-1", parse_str)
INDEX_DATA_PATH_SETTING = Setting("index.data_path", "", parse_str)
INDEX_INDEXING_SLOWLOG_LEVEL_SETTING = Setting("index.indexing.slowlog.level", "TRACE", parse_str)
INDEX_SEARCH_SLOWLOG_LEVEL = Setting("index.search.slowlog.level", "TRACE", parse_str)
INDEX_STORE_TYPE_SETTING = Setting("index.store.type", "", parse_str)
INDEX_ROUTING_REQUIRE_SETTING = Setting("index.routing.allocation.require._tier", "", parse_str)
INDEX_ROUTING_INCLUDE_SETTING = Setting("index.routing.allocation.include._tier", "", parse_str)
INDEX_ROUTING_EXCLUDE_SETTING = Setting("index.routing.allocation.exclude._tier", "", parse_str)
MAX_ADJACENCY_MATRIX_FILTERS_SETTING = Setting("index.max_adjacency_matrix_filters", 100, parse_int)
INDEX_FROZEN = Setting("index.frozen", False, parse_bool)
TIER_PREFERENCE_SETTING = Setting("index.routing.allocation.include._tier_preference", "", parse_str)

INDICES_MAX_CLAUSE_COUNT_KEY = "indices.query.bool.max_clause_count"
SIMPLEFS_STORE_TYPE = "simplefs"
