from esdeprecation.models import ClusterState, DiscoveryNode

DATA_ROLE = "data"
DATA_CONTENT = "data_content"
DATA_HOT = "data_hot"
DATA_WARM = "data_warm"
DATA_COLD = "data_cold"
DATA_FROZEN = "data_frozen"

# The generic data role implies all tier roles
DATA_ROLES = frozenset({DATA_ROLE, DATA_CONTENT, DATA_HOT, DATA_WARM, DATA_COLD, DATA_FROZEN})


def can_contain_data(node: DiscoveryNode) -> bool:
    return bool(node.roles & DATA_ROLES)


def data_nodes_without_all_data_roles(cluster_state: ClusterState) -> list[DiscoveryNode]:
    """Data nodes without the generic data role, i.e. nodes that will not hold indices without a tier preference"""
    return [node for node in cluster_state.nodes if can_contain_data(node) and DATA_ROLE not in node.roles]


def parse_tier_list(tiers: str | None) -> list[str]:
    """Parse a tier preference such as 'data_warm,data_hot' into a list of tiers, most preferred first"""
    if not tiers:
        return []
    return [tier.strip() for tier in tiers.split(",") if tier.strip()]
