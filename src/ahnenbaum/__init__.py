"""Ahnenbaum - genealogical relationship graph engine.

Typed relationship edges over persons, on-demand kinship derivation,
and pedigree / family-graph layout for rendering.
"""

__version__ = "0.3.0"

# Lazy imports to avoid circular dependencies
def __getattr__(name: str):
    if name == "GenealogyEngine":
        from ahnenbaum.engine import GenealogyEngine
        return GenealogyEngine
    if name == "models":
        from ahnenbaum import models
        return models
    if name == "layout":
        from ahnenbaum import layout
        return layout
    if name == "services":
        from ahnenbaum import services
        return services
    if name == "storage":
        from ahnenbaum import storage
        return storage
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
