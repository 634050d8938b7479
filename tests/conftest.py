import pytest

from esdeprecation.config import get_settings
from esdeprecation.models import ClusterState, DiscoveryNode


@pytest.fixture(autouse=True)
def default_settings(monkeypatch):
    # Make sure a local .env file or environment does not influence the tests
    for var in ["ESDEPRECATION_MAX_MAPPING_DEPTH", "ESDEPRECATION_FIELD_EXPANSION_LIMIT", "ESDEPRECATION_LOG_LEVEL"]:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("ESDEPRECATION_ENV_FILE", "/nonexistent/.env")
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


@pytest.fixture()
def tiered_cluster() -> ClusterState:
    """A cluster with a dedicated hot node and a warm node, i.e. no node that has the generic data role"""
    return ClusterState(
        nodes=[
            DiscoveryNode(name="master", roles=frozenset({"master"})),
            DiscoveryNode(name="hot", roles=frozenset({"data_hot", "data_content", "ingest"})),
            DiscoveryNode(name="warm", roles=frozenset({"data_warm"})),
        ]
    )


@pytest.fixture()
def data_cluster() -> ClusterState:
    """A cluster in which every data node has the generic data role"""
    return ClusterState(
        nodes=[
            DiscoveryNode(name="master", roles=frozenset({"master"})),
            DiscoveryNode(name="data1", roles=frozenset({"data", "ingest"})),
            DiscoveryNode(name="data2", roles=frozenset({"data", "data_hot"})),
        ]
    )
