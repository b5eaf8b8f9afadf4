from __future__ import annotations

import os
from dataclasses import dataclass


def _f(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, default))
    except ValueError:
        return default


def _i(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, default))
    except ValueError:
        return default


def _s(name: str, default: str) -> str:
    return os.getenv(name) or default


@dataclass(frozen=True)
class EngineConfig:
    db_path: str = _s("AHNENBAUM_DB_PATH", "./data/ahnenbaum.db")
    log_level: str = _s("AHNENBAUM_LOG_LEVEL", "INFO").upper()

    # Kinship neighborhood BFS bound (hops from the target person)
    kinship_max_depth: int = _i("AHNENBAUM_KINSHIP_MAX_DEPTH", 5)

    # Ancestor tree depth, root counts as generation 1
    tree_generations: int = _i("AHNENBAUM_TREE_GENERATIONS", 4)

    # Relationship listing
    list_default_limit: int = _i("AHNENBAUM_LIST_DEFAULT_LIMIT", 20)
    list_max_limit: int = _i("AHNENBAUM_LIST_MAX_LIMIT", 100)

    # Pedigree layout
    pedigree_node_height: float = _f("AHNENBAUM_PEDIGREE_NODE_HEIGHT", 120.0)
    pedigree_horizontal_spacing: float = _f("AHNENBAUM_PEDIGREE_HORIZONTAL_SPACING", 200.0)

    # Family graph layout
    graph_horizontal_spacing: float = _f("AHNENBAUM_GRAPH_HORIZONTAL_SPACING", 200.0)
    graph_vertical_spacing: float = _f("AHNENBAUM_GRAPH_VERTICAL_SPACING", 160.0)
    graph_card_half_height: float = _f("AHNENBAUM_GRAPH_CARD_HALF_HEIGHT", 40.0)


CONFIG = EngineConfig()
