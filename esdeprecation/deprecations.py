"""
Run all deprecation checks against one or more indices.

A check that cannot be completed (e.g. because the mapping is malformed, or a setting has an invalid value)
is logged and skipped, without affecting the other checks or indices. A mapping that is nested too deep to
analyze is reported as an issue, as the operator should know that it was not (fully) checked.
"""

import logging
from typing import Iterable

from esdeprecation.checks import INDEX_SETTINGS_CHECKS, IndexCheck, empty_data_tier_preference_check
from esdeprecation.index_settings import SettingValueError
from esdeprecation.mapping import MappingDepthError, MappingStructureError
from esdeprecation.models import ClusterState, DeprecationIssue, DeprecationLevel, IndexMetadata


def _too_deep_message(index: IndexMetadata) -> str:
    return f"could not fully analyze the mapping of index [{index.name}]"


def _mapping_too_deep(index: IndexMetadata, check: IndexCheck, e: MappingDepthError) -> DeprecationIssue:
    return DeprecationIssue(
        level=DeprecationLevel.warning,
        message=_too_deep_message(index),
        url="https://www.elastic.co/guide/en/elasticsearch/reference/current/mapping-settings-limit.html",
        details=f"Check [{check.__name__}] was skipped: {e}",
    )


def run_check(index: IndexMetadata, check: IndexCheck) -> DeprecationIssue | None:
    """Run a single check, turning a failure of that check into a log message (or an issue for too deep mappings)"""
    try:
        return check(index)
    except MappingDepthError as e:
        logging.warning(f"Index {index.name}: {check.__name__} could not analyze mapping: {e}")
        return _mapping_too_deep(index, check, e)
    except (MappingStructureError, SettingValueError):
        logging.exception(f"Index {index.name}: {check.__name__} failed")
        return None


def check_index(index: IndexMetadata, cluster_state: ClusterState | None = None) -> list[DeprecationIssue]:
    """
    Run all checks against an index and return the issues that were found.
    If cluster_state is given, also check whether the index can be allocated on the data tiers of the cluster.
    """
    checks: list[IndexCheck] = list(INDEX_SETTINGS_CHECKS)
    if cluster_state is not None:

        def data_tier_preference_check(ix: IndexMetadata) -> DeprecationIssue | None:
            return empty_data_tier_preference_check(cluster_state, ix)

        checks.append(data_tier_preference_check)

    issues = []
    reported_too_deep = False
    for check in checks:
        logging.debug(f"Index {index.name}: running {check.__name__}")
        issue = run_check(index, check)
        if issue is None:
            continue
        # every mapping check fails in the same way on a too deep mapping, only report that once
        if issue.message == _too_deep_message(index):
            if reported_too_deep:
                continue
            reported_too_deep = True
        issues.append(issue)
    return issues


def check_indices(
    indices: Iterable[IndexMetadata], cluster_state: ClusterState | None = None
) -> dict[str, list[DeprecationIssue]]:
    """Check all indices, returning the issues per index name (indices without issues are omitted)"""
    result = {}
    for index in indices:
        issues = check_index(index, cluster_state)
        logging.info(f"Index {index.name}: {len(issues)} deprecation issue(s)")
        if issues:
            result[index.name] = issues
    return result
