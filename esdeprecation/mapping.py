"""
Walking the field mappings of an index

A mapping is a tree of dicts. Fields are defined under "properties" (object fields can have their own
"properties"), and a field can have multi-fields under "fields", e.g.:

  {"properties": {"title": {"type": "text", "fields": {"raw": {"type": "keyword"}}}}}

The functions below visit every field and multi-field in the order in which they are defined. The walk
uses an explicit stack rather than recursion, so deeply nested mappings cannot exhaust the call stack;
instead, mappings deeper than max_mapping_depth (see config.py) raise a MappingDepthError.
"""

from typing import Any, Callable, Iterator, Mapping, NamedTuple

from esdeprecation.config import get_settings
from esdeprecation.date_formats import format_suggestion

MappingNode = Mapping[str, Any]
FieldEntry = tuple[str, MappingNode]
FieldPredicate = Callable[[MappingNode], bool]
FieldFormatter = Callable[[str, FieldEntry], str]

# Field types that are not counted towards the automatic field expansion limit, see count_fields_recursively
TYPES_THAT_DONT_COUNT = frozenset({"binary", "geo_point", "geo_shape"})

GEO_SHAPE_TYPE = "geo_shape"
GEO_SHAPE_DEPRECATED_PARAMETERS = ("strategy", "tree", "tree_levels", "precision", "distance_error_pct", "points_only")


class MappingStructureError(ValueError):
    """A mapping does not have the expected shape, e.g. "properties" is not a dict of field definitions"""


class MappingDepthError(RecursionError):
    """A mapping is nested deeper than the configured maximum depth"""


class FieldVisit(NamedTuple):
    #: the entry in "properties" that is being visited
    entry: FieldEntry
    #: the name of the multi-field, if a multi-field of entry is being visited
    multifield: str | None
    #: the mapping of the visited field or multi-field
    node: MappingNode


class _Descend(NamedTuple):
    node: MappingNode
    path: str


def _child_map(node: MappingNode, key: str, path: str) -> MappingNode:
    value = node.get(key)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise MappingStructureError(f"Expected [{path}{key}] to be an object, got {type(value).__name__}")
    return value


def _as_node(value: Any, path: str) -> MappingNode:
    if not isinstance(value, Mapping):
        raise MappingStructureError(f"Expected field [{path}] to be an object, got {type(value).__name__}")
    if "type" in value and not isinstance(value["type"], str):
        raise MappingStructureError(f"Expected the type of field [{path}] to be a string, got {value['type']!r}")
    return value


def _level(parent: MappingNode, path: str) -> Iterator[FieldVisit | _Descend]:
    for name, value in _child_map(parent, "properties", path).items():
        field_path = f"{path}properties.{name}"
        node = _as_node(value, field_path)
        entry = (name, node)
        yield FieldVisit(entry, None, node)
        for multifield_name, multifield_value in _child_map(node, "fields", f"{field_path}.").items():
            multifield_path = f"{field_path}.fields.{multifield_name}"
            multifield_node = _as_node(multifield_value, multifield_path)
            yield FieldVisit(entry, multifield_name, multifield_node)
            if "properties" in multifield_node:
                yield _Descend(multifield_node, f"{multifield_path}.")
        if "properties" in node:
            yield _Descend(node, f"{field_path}.")


def walk_fields(parent: MappingNode, max_depth: int | None = None) -> Iterator[FieldVisit]:
    """
    Yield every field and multi-field below parent, depth first and in definition order:
    a field, then its multi-fields (and anything nested in them), then its own sub-fields.

    :param parent: The mapping to walk, usually the root of a mapping document
    :param max_depth: Maximum number of nested properties levels (default: max_mapping_depth setting)
    :raises MappingStructureError: if properties, fields or a field definition is not an object
    :raises MappingDepthError: if the mapping is nested more than max_depth levels
    """
    if max_depth is None:
        max_depth = get_settings().max_mapping_depth
    stack = [_level(parent, "")]
    while stack:
        step = next(stack[-1], None)
        if step is None:
            stack.pop()
        elif isinstance(step, _Descend):
            if len(stack) >= max_depth:
                location = step.path.rstrip(".")
                raise MappingDepthError(f"Mapping is nested more than {max_depth} levels deep at [{location}]")
            stack.append(_level(step.node, step.path))
        else:
            yield step


def find_in_properties_recursively(
    type: str,
    parent_map: MappingNode,
    predicate: FieldPredicate,
    field_formatter: FieldFormatter,
    max_depth: int | None = None,
) -> list[str]:
    """
    Find all fields and multi-fields in the mapping for which predicate is true.

    :param type: The document type of the mapping, passed on to the formatter
    :param parent_map: The mapping to read properties from
    :param predicate: A function that returns True if the mapping of a field is an issue
    :param field_formatter: A function that takes a type and a (name, mapping) entry and describes the field
    :return: A list of issues such as "[type: _doc, field: title]" or "[type: _doc, field: title, multifield: raw]"
    """
    issues = []
    for visit in walk_fields(parent_map, max_depth):
        if predicate(visit.node):
            location = field_formatter(type, visit.entry)
            if visit.multifield is None:
                issues.append(f"[{location}]")
            else:
                issues.append(f"[{location}, multifield: {visit.multifield}]")
    return issues


def _counts_as_field(node: MappingNode) -> bool:
    if "type" not in node:
        return False
    # an object without properties does not result in any fields
    if node["type"] == "object" and "properties" not in node:
        return False
    return node["type"] not in TYPES_THAT_DONT_COUNT


def count_fields_recursively(type: str, parent_map: MappingNode, max_depth: int | None = None) -> int:
    """
    Count the fields in a mapping in the same way the query parser counts fields for automatic field expansion
    (i.e. query_string and multi_match queries without explicit fields).

    Note: a multi-field is excluded based on the type of its *parent* field, not its own type, so a
    geo_point multi-field of a text field is counted, but a keyword multi-field of a binary field is not.
    """
    fields = 0
    for visit in walk_fields(parent_map, max_depth):
        if visit.multifield is None:
            if _counts_as_field(visit.node):
                fields += 1
        elif "type" in visit.node and visit.entry[1].get("type") not in TYPES_THAT_DONT_COUNT:
            fields += 1
    return fields


######################## FORMATTERS #########################


def format_field(type: str, entry: FieldEntry) -> str:
    name, _ = entry
    return f"type: {type}, field: {name}"


def format_date_field(type: str, entry: FieldEntry) -> str:
    name, node = entry
    fmt = node.get("format")
    suggestion = format_suggestion(fmt) if isinstance(fmt, str) else ""
    return f"type: {type}, field: {name}, format: {fmt}, suggestion: {suggestion}"


def format_deprecated_geo_shape_params(type: str, entry: FieldEntry) -> str:
    name, node = entry
    return "; ".join(
        f"parameter [{param}] in field [{name}]" for param in GEO_SHAPE_DEPRECATED_PARAMETERS if param in node
    )
