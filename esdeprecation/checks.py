"""
Index-specific deprecation checks

Every check is a function of the metadata of a single index (and, for empty_data_tier_preference_check,
the cluster state) that returns a DeprecationIssue, or None if the index has no such problem.
Checks do not depend on each other and can be run in any order.

There are two kinds of checks:
- Settings checks look up a single index setting (see index_settings.py)
- Mapping checks walk all fields in all mappings of the index (see mapping.py) and report one issue
  listing every field that has the problem
"""

from typing import Any, Callable, Mapping

from esdeprecation import data_tiers
from esdeprecation.config import get_settings
from esdeprecation.date_formats import USE_NEW_FORMAT_SPECIFIERS, is_deprecated_pattern
from esdeprecation.index_settings import (
    DEFAULT_FIELD_SETTING,
    INDEX_DATA_PATH_SETTING,
    INDEX_FROZEN,
    INDEX_INDEXING_SLOWLOG_LEVEL_SETTING,
    INDEX_ROUTING_EXCLUDE_SETTING,
    INDEX_ROUTING_INCLUDE_SETTING,
    INDEX_ROUTING_REQUIRE_SETTING,
    INDEX_SEARCH_SLOWLOG_LEVEL,
    INDEX_SOFT_DELETES_SETTING,
    INDEX_STORE_TYPE_SETTING,
    INDEX_TRANSLOG_RETENTION_AGE_SETTING,
    INDEX_TRANSLOG_RETENTION_SIZE_SETTING,
    INDICES_MAX_CLAUSE_COUNT_KEY,
    MAX_ADJACENCY_MATRIX_FILTERS_SETTING,
    SIMPLEFS_STORE_TYPE,
    TIER_PREFERENCE_SETTING,
    Setting,
)
from esdeprecation.mapping import (
    GEO_SHAPE_DEPRECATED_PARAMETERS,
    GEO_SHAPE_TYPE,
    MappingNode,
    count_fields_recursively,
    find_in_properties_recursively,
    format_date_field,
    format_deprecated_geo_shape_params,
    format_field,
)
from esdeprecation.models import V_7_0_0, ClusterState, DeprecationIssue, DeprecationLevel, IndexMetadata

IndexCheck = Callable[[IndexMetadata], DeprecationIssue | None]

REMOVED_SETTING_MESSAGE = "setting [{key}] is deprecated and will be removed in the next major version"
TIER_FILTERING_URL = "https://ela.st/es-deprecation-7-tier-filtering-settings"


def _find_in_all_mappings(index: IndexMetadata, predicate, formatter) -> list[str]:
    issues = []
    for mapping in index.mappings:
        issues += find_in_properties_recursively(mapping.type, mapping.source, predicate, formatter)
    return issues


def _as_java_string(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, list):
        return "[" + ", ".join(_as_java_string(v) for v in value) + "]"
    return str(value)


######################## GENERIC SETTINGS CHECKS #########################


def check_removed_setting(
    settings: Mapping[str, Any],
    removed_setting: Setting,
    url: str,
    level: DeprecationLevel,
    message_pattern: str = REMOVED_SETTING_MESSAGE,
) -> DeprecationIssue | None:
    """
    Report a setting that will be removed in the next major version, if it is set.

    :param settings: The (flat) index settings
    :param removed_setting: The setting to look for
    :param url: Link to the documentation of this deprecation
    :param level: The level of the issue
    :param message_pattern: Message for the issue, {key} is replaced by the setting key
    """
    if not removed_setting.exists(settings):
        return None
    key = removed_setting.key
    value = _as_java_string(removed_setting.get(settings))
    return DeprecationIssue(
        level=level,
        message=message_pattern.format(key=key),
        url=url,
        details=f"the setting [{key}] is currently set to [{value}], remove this setting",
    )


def slow_log_setting_check(index: IndexMetadata, setting: Setting) -> DeprecationIssue | None:
    if not setting.exists(index.settings):
        return None
    return DeprecationIssue(
        level=DeprecationLevel.warning,
        message=f"setting [{setting.key}] is deprecated and will be removed in a future version",
        url="https://ela.st/es-deprecation-7-slowlog-settings",
        details=f"Found [{setting.key}] configured. Discontinue use of this setting. Use thresholds.",
    )


######################## INDEX CHECKS #########################


def old_indices_check(index: IndexMetadata) -> DeprecationIssue | None:
    created_with = index.creation_version
    if created_with.before(V_7_0_0):
        return DeprecationIssue(
            level=DeprecationLevel.critical,
            message="Index created before 7.0",
            url="https://ela.st/es-deprecation-7-reindex",
            details=f"This index was created using version: {created_with}",
        )
    return None


def too_many_fields_check(index: IndexMetadata) -> DeprecationIssue | None:
    if DEFAULT_FIELD_SETTING.exists(index.settings):
        return None
    field_count = sum(count_fields_recursively(m.type, m.source) for m in index.mappings)
    # We cannot read indices.query.bool.max_clause_count from the index, so this uses the configured limit.
    limit = get_settings().field_expansion_limit
    if field_count > limit:
        return DeprecationIssue(
            level=DeprecationLevel.warning,
            message="Number of fields exceeds automatic field expansion limit",
            url="https://ela.st/es-deprecation-7-number-of-auto-expanded-fields",
            details=(
                f"This index has [{field_count}] fields, which exceeds the automatic field expansion limit of {limit} "
                f"and does not have [{DEFAULT_FIELD_SETTING.key}] set, which may cause queries which use "
                "automatic field expansion, such as query_string, simple_query_string, and multi_match to fail if "
                "fields are not explicitly specified in the query."
            ),
        )
    return None


def _is_date_field_with_deprecated_pattern(field: MappingNode) -> bool:
    fmt = field.get("format")
    return field.get("type") == "date" and isinstance(fmt, str) and is_deprecated_pattern(fmt)


def deprecated_date_time_format(index: IndexMetadata) -> DeprecationIssue | None:
    if not index.creation_version.before(V_7_0_0):
        return None
    fields = _find_in_all_mappings(index, _is_date_field_with_deprecated_pattern, format_date_field)
    if fields:
        return DeprecationIssue(
            level=DeprecationLevel.warning,
            message="Date field format uses patterns which has changed meaning in 7.0",
            url="https://ela.st/es-deprecation-7-java-time",
            details=(
                f"This index has date fields with deprecated formats: [{', '.join(fields)}]. "
                f"{USE_NEW_FORMAT_SPECIFIERS}"
            ),
        )
    return None


def _contains_chained_multi_fields(field: MappingNode) -> bool:
    multi_fields = field.get("fields")
    if not isinstance(multi_fields, Mapping):
        return False
    return any(isinstance(sub_field, Mapping) and "fields" in sub_field for sub_field in multi_fields.values())


def chained_multi_fields_check(index: IndexMetadata) -> DeprecationIssue | None:
    issues = _find_in_all_mappings(index, _contains_chained_multi_fields, format_field)
    if issues:
        return DeprecationIssue(
            level=DeprecationLevel.warning,
            message="Multi-fields within multi-fields",
            url="https://ela.st/es-deprecation-7-chained-multi-fields",
            details=f"The names of fields that contain chained multi-fields: [{', '.join(issues)}]",
        )
    return None


def map_contains_field_names_disabled(mapping: MappingNode) -> bool:
    """Does the mapping explicitly set _field_names.enabled (which is deprecated, whatever its value)"""
    field_names = mapping.get("_field_names")
    return isinstance(field_names, Mapping) and "enabled" in field_names


def field_names_disabled_check(index: IndexMetadata) -> DeprecationIssue | None:
    mapping = index.mapping()
    if mapping is not None and map_contains_field_names_disabled(mapping.source):
        return DeprecationIssue(
            level=DeprecationLevel.warning,
            message="Index mapping contains explicit `_field_names` enabling settings.",
            url="https://ela.st/es-deprecation-7-field_names-settings",
            details=(
                "The index mapping contains a deprecated `enabled` setting for `_field_names` "
                "that should be removed moving foward."
            ),
        )
    return None


def translog_retention_setting_check(index: IndexMetadata) -> DeprecationIssue | None:
    if not INDEX_SOFT_DELETES_SETTING.get(index.settings):
        return None
    if INDEX_TRANSLOG_RETENTION_SIZE_SETTING.exists(index.settings) or INDEX_TRANSLOG_RETENTION_AGE_SETTING.exists(
        index.settings
    ):
        return DeprecationIssue(
            level=DeprecationLevel.warning,
            message="translog retention settings are ignored",
            url="https://ela.st/es-deprecation-7-translog-settings",
            details=(
                "translog retention settings [index.translog.retention.size] and [index.translog.retention.age] "
                "are ignored because translog is no longer used in peer recoveries with soft-deletes enabled "
                "(default in 7.0 or later)"
            ),
        )
    return None


def check_index_data_path(index: IndexMetadata) -> DeprecationIssue | None:
    if INDEX_DATA_PATH_SETTING.exists(index.settings):
        return DeprecationIssue(
            level=DeprecationLevel.critical,
            message=f"setting [{INDEX_DATA_PATH_SETTING.key}] is deprecated and will be removed in a future version",
            url="https://ela.st/es-deprecation-7-shared-path-settings",
            details="Found index data path configured. Discontinue use of this setting.",
        )
    return None


def indexing_slow_log_level_setting_check(index: IndexMetadata) -> DeprecationIssue | None:
    return slow_log_setting_check(index, INDEX_INDEXING_SLOWLOG_LEVEL_SETTING)


def search_slow_log_level_setting_check(index: IndexMetadata) -> DeprecationIssue | None:
    return slow_log_setting_check(index, INDEX_SEARCH_SLOWLOG_LEVEL)


def store_type_setting_check(index: IndexMetadata) -> DeprecationIssue | None:
    if INDEX_STORE_TYPE_SETTING.get(index.settings) == SIMPLEFS_STORE_TYPE:
        return DeprecationIssue(
            level=DeprecationLevel.warning,
            message="[simplefs] is deprecated and will be removed in future versions",
            url="https://ela.st/es-deprecation-7-simplefs-store-type",
            details=(
                "[simplefs] is deprecated and will be removed in 8.0. Use [niofs] or other file systems instead. "
                "Elasticsearch 7.15 or later uses [niofs] for the [simplefs] store type "
                "as it offers superior or equivalent performance to [simplefs]."
            ),
        )
    return None


def check_index_routing_require_setting(index: IndexMetadata) -> DeprecationIssue | None:
    return check_removed_setting(
        index.settings, INDEX_ROUTING_REQUIRE_SETTING, TIER_FILTERING_URL, DeprecationLevel.critical
    )


def check_index_routing_include_setting(index: IndexMetadata) -> DeprecationIssue | None:
    return check_removed_setting(
        index.settings, INDEX_ROUTING_INCLUDE_SETTING, TIER_FILTERING_URL, DeprecationLevel.critical
    )


def check_index_routing_exclude_setting(index: IndexMetadata) -> DeprecationIssue | None:
    return check_removed_setting(
        index.settings, INDEX_ROUTING_EXCLUDE_SETTING, TIER_FILTERING_URL, DeprecationLevel.critical
    )


def check_index_matrix_filters_setting(index: IndexMetadata) -> DeprecationIssue | None:
    return check_removed_setting(
        index.settings,
        MAX_ADJACENCY_MATRIX_FILTERS_SETTING,
        "https://ela.st/es-deprecation-7-adjacency-matrix-filters-setting",
        DeprecationLevel.warning,
        message_pattern="[{key}] setting will be ignored in 8.0. Use [" + INDICES_MAX_CLAUSE_COUNT_KEY + "] instead.",
    )


def _is_geo_shape_field_with_deprecated_param(field: MappingNode) -> bool:
    return field.get("type") == GEO_SHAPE_TYPE and any(param in field for param in GEO_SHAPE_DEPRECATED_PARAMETERS)


def check_geo_shape_mappings(index: IndexMetadata) -> DeprecationIssue | None:
    mapping = index.mapping()
    if mapping is None:
        return None
    messages = find_in_properties_recursively(
        GEO_SHAPE_TYPE,
        mapping.source,
        _is_geo_shape_field_with_deprecated_param,
        format_deprecated_geo_shape_params,
    )
    if not messages:
        return None
    return DeprecationIssue(
        level=DeprecationLevel.critical,
        message=f"mappings for index {index.name} contains deprecated geo_shape properties that must be removed",
        url="https://ela.st/es-deprecation-7-geo-shape-mappings",
        details=f"The following geo_shape parameters must be removed from {index.name}: [{'; '.join(messages)}]",
    )


def frozen_index_setting_check(index: IndexMetadata) -> DeprecationIssue | None:
    if INDEX_FROZEN.get(index.settings):
        return DeprecationIssue(
            level=DeprecationLevel.warning,
            message=(
                f"index [{index.name}] is a frozen index. "
                "The frozen indices feature is deprecated and will be removed in a future version"
            ),
            url="https://www.elastic.co/guide/en/elasticsearch/reference/master/frozen-indices.html",
            details=(
                "Frozen indices no longer offer any advantages. "
                "Consider cold or frozen tiers in place of frozen indices."
            ),
        )
    return None


def empty_data_tier_preference_check(cluster_state: ClusterState, index: IndexMetadata) -> DeprecationIssue | None:
    if not data_tiers.data_nodes_without_all_data_roles(cluster_state):
        return None
    tier_preference = data_tiers.parse_tier_list(TIER_PREFERENCE_SETTING.get(index.settings))
    if tier_preference:
        return None
    return DeprecationIssue(
        level=DeprecationLevel.critical,
        message=(
            f"index [{index.name}] does not have a [{TIER_PREFERENCE_SETTING.key}] setting, "
            "in 8.0 this setting will be required for all indices and may not be empty or null."
        ),
        url="https://www.elastic.co/guide/en/elasticsearch/reference/current/data-tiers.html",
        details="Update the settings for this index to specify an appropriate tier preference.",
    )


# All checks that only need the index metadata, in the order in which they are reported
INDEX_SETTINGS_CHECKS: list[IndexCheck] = [
    old_indices_check,
    too_many_fields_check,
    chained_multi_fields_check,
    deprecated_date_time_format,
    translog_retention_setting_check,
    field_names_disabled_check,
    check_index_data_path,
    indexing_slow_log_level_setting_check,
    search_slow_log_level_setting_check,
    store_type_setting_check,
    check_index_routing_require_setting,
    check_index_routing_include_setting,
    check_index_routing_exclude_setting,
    check_index_matrix_filters_setting,
    check_geo_shape_mappings,
    frozen_index_setting_check,
]
