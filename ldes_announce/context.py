"""JSON-LD context composition for view documents.

The view context is derived from the context the tree metadata carries for
the node:

  missing or empty  -> {"@vocab": TREE}
  string            -> {"@vocab": <string>}
  mapping           -> a copy of the mapping, plus the ldes and void prefixes

Prefixes are only added when the key is unbound. An existing binding with a
different value is kept and logged; the external context is never mutated.
The same rule applies on the read and write paths. The writer additionally
binds its prefixes for missing, empty and string contexts (see
make_written_view_context()).
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from .vocabularies import LDES, TREE, VOID

logger = logging.getLogger(__name__)

VIEW_PREFIXES: dict[str, str] = {
    "ldes": str(LDES),
    "void": str(VOID),
}


def make_view_context(tree_context: str | Mapping[str, Any] | None) -> dict[str, Any]:
    if not tree_context:
        return {"@vocab": str(TREE)}
    if isinstance(tree_context, str):
        return {"@vocab": tree_context}
    return merge_prefixes(dict(tree_context), VIEW_PREFIXES)


def make_written_view_context(
    tree_context: str | Mapping[str, Any] | None,
    extra_prefixes: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Context of a view built by the writer.

    The written view uses prefixed keys (ldes:configuration, dct:issued), so
    their prefixes are bound whatever shape the node context has. Otherwise
    JSON-LD would read those keys as absolute IRIs.
    """
    prefixes = dict(VIEW_PREFIXES)
    prefixes.update(extra_prefixes or {})
    return merge_prefixes(make_view_context(tree_context), prefixes)


def merge_prefixes(context: dict[str, Any], prefixes: Mapping[str, str]) -> dict[str, Any]:
    """Bind each prefix in ``context`` unless the key is already bound."""
    for prefix, namespace in prefixes.items():
        existing = context.get(prefix)
        if existing is None:
            context[prefix] = namespace
        elif existing != namespace:
            logger.warning(
                "Context already binds %r to %r, keeping it instead of %r",
                prefix, existing, namespace,
            )
    return context
