from enum import Enum
from typing import Any, Mapping

from class_doc import extract_docs_from_cls_obj
from pydantic import BaseModel, ConfigDict, Field
from typing_extensions import Self

from esdeprecation.index_settings import flatten_settings

######################## DEPRECATION ISSUES #########################


class DeprecationLevel(str, Enum):
    #: the index keeps working after the upgrade, but should be changed
    warning = "warning"

    #: the index (or the upgrade) will fail unless this is resolved first
    critical = "critical"


for field, doc in extract_docs_from_cls_obj(DeprecationLevel).items():
    DeprecationLevel[field].__doc__ = "\n".join(doc)


class DeprecationIssue(BaseModel):
    """A single problem found in the metadata of an index. Issues are never changed after creation."""

    model_config = ConfigDict(frozen=True)

    level: DeprecationLevel
    message: str
    url: str
    details: str | None = None
    resolve_during_rolling_upgrade: bool = False
    meta: dict[str, Any] | None = None


######################## VERSIONS #########################


class Version(BaseModel):
    """A major.minor.revision version, ordered by its numeric parts"""

    model_config = ConfigDict(frozen=True)

    major: int = Field(ge=0)
    minor: int = Field(ge=0)
    revision: int = Field(ge=0)

    @classmethod
    def parse(cls, version: str) -> Self:
        """Parse a version string such as 6.8.0 (a qualifier such as -SNAPSHOT is ignored)"""
        number = version.split("-", 1)[0]
        parts = number.split(".")
        if not 1 <= len(parts) <= 3 or not all(p.isdigit() for p in parts):
            raise ValueError(f"Cannot parse version {version!r}")
        major, minor, revision = (int(p) for p in parts + ["0"] * (3 - len(parts)))
        return cls(major=major, minor=minor, revision=revision)

    @classmethod
    def from_id(cls, version_id: int | str) -> Self:
        """
        Decode the numeric id stored in index.version.created.
        The id is major * 1000000 + minor * 10000 + revision * 100 + build, e.g. 6080099 is 6.8.0
        """
        version_id = int(version_id)
        return cls(major=version_id // 1000000, minor=version_id // 10000 % 100, revision=version_id // 100 % 100)

    def _key(self) -> tuple[int, int, int]:
        return self.major, self.minor, self.revision

    def before(self, other: "Version") -> bool:
        return self._key() < other._key()

    def __lt__(self, other: "Version") -> bool:
        return self._key() < other._key()

    def __le__(self, other: "Version") -> bool:
        return self._key() <= other._key()

    def __gt__(self, other: "Version") -> bool:
        return self._key() > other._key()

    def __ge__(self, other: "Version") -> bool:
        return self._key() >= other._key()

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.revision}"


V_7_0_0 = Version(major=7, minor=0, revision=0)


######################## INDEX METADATA #########################

# Parameters that can only appear at the root of a typeless mapping. If a mapping body contains any of these,
# it is not keyed by document type.
ROOT_MAPPING_PARAMETERS = {
    "properties",
    "dynamic",
    "dynamic_templates",
    "date_detection",
    "dynamic_date_formats",
    "numeric_detection",
    "enabled",
    "runtime",
}

# Metadata fields that can be configured at the root of a mapping. Unlike a type name such as _doc,
# these also mean the mapping is typeless.
ROOT_METADATA_FIELDS = {
    "_source",
    "_meta",
    "_routing",
    "_field_names",
    "_all",
    "_size",
    "_id",
    "_index",
    "_type",
    "_uid",
    "_parent",
    "_timestamp",
    "_ttl",
    "_ignored",
    "_data_stream_timestamp",
    "_doc_count",
    "_tier",
}

DEFAULT_TYPE = "_doc"
# The template for new types in indices created before 6.0, not a mapping of any documents
DEFAULT_MAPPING_TYPE = "_default_"


class MappingMetadata(BaseModel):
    """One mapping document of an index: the document type and the root of the mapping tree"""

    model_config = ConfigDict(frozen=True)

    type: str = DEFAULT_TYPE
    source: dict[str, Any] = {}


class IndexMetadata(BaseModel):
    """Point in time snapshot of the metadata of an index. Settings are stored with flat, dotted keys."""

    model_config = ConfigDict(frozen=True)

    name: str
    creation_version: Version
    settings: dict[str, Any] = {}
    mappings: list[MappingMetadata] = []

    def mapping(self) -> MappingMetadata | None:
        """The mapping of this index, if it has one. Indices created before 7.0 can hold more than one type"""
        return self.mappings[0] if self.mappings else None

    @classmethod
    def from_elastic(cls, name: str, body: Mapping[str, Any]) -> Self:
        """
        Create a snapshot from the body of a GET /<index> response for a single index, i.e. r[name].
        Settings can be flat (?flat_settings=true) or nested, mappings can be typeless or keyed by type.
        """
        settings = flatten_settings(body.get("settings", {}))
        created = settings.get("index.version.created")
        if created is None:
            raise ValueError(f"Index {name} has no index.version.created setting")
        return cls(
            name=name,
            creation_version=Version.from_id(created),
            settings=settings,
            mappings=_mappings_from_elastic(body.get("mappings") or {}),
        )


def _mappings_from_elastic(mappings: Mapping[str, Any]) -> list[MappingMetadata]:
    if not mappings:
        return []
    if mappings.keys() & (ROOT_MAPPING_PARAMETERS | ROOT_METADATA_FIELDS):
        return [MappingMetadata(type=DEFAULT_TYPE, source=dict(mappings))]
    # No root parameters, so this should be a mapping per type (include_type_name=true, or before 7.0)
    if all(isinstance(v, Mapping) for v in mappings.values()):
        return [
            MappingMetadata(type=type, source=dict(source))
            for type, source in mappings.items()
            if type != DEFAULT_MAPPING_TYPE
        ]
    return [MappingMetadata(type=DEFAULT_TYPE, source=dict(mappings))]


######################## CLUSTER STATE #########################


class DiscoveryNode(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    roles: frozenset[str] = frozenset()


class ClusterState(BaseModel):
    """The part of the cluster state the checks need: which nodes exist and what roles they have"""

    model_config = ConfigDict(frozen=True)

    nodes: list[DiscoveryNode] = []

    @classmethod
    def from_elastic(cls, body: Mapping[str, Any]) -> Self:
        """Create from the body of a GET /_nodes response"""
        nodes = [
            DiscoveryNode(name=node.get("name", node_id), roles=frozenset(node.get("roles", [])))
            for node_id, node in body.get("nodes", {}).items()
        ]
        return cls(nodes=nodes)
