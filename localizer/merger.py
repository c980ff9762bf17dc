"""Additive structural sync of a translation tree against the baseline."""

import logging
from dataclasses import dataclass, field

from .tree import Node, Tree, copy_tree, empty_mirror, join_path, leaf_count

log = logging.getLogger(__name__)


@dataclass
class SyncOutcome:
    """Result of merging one baseline tree into one target tree."""
    updated: Tree
    fields_added: int = 0
    replaced: list = field(default_factory=list)  # dotted paths rebuilt on type mismatch

    @property
    def changed(self) -> bool:
        return self.fields_added > 0 or bool(self.replaced)


def sync(baseline: Tree, target: Tree) -> SyncOutcome:
    """Bring ``target`` up to the key set of ``baseline`` without losing data.

    Keys missing from the target are inserted as blank templates.  A target
    leaf sitting where the baseline has a nested object is discarded and
    rebuilt.  Existing leaves, even empty ones, are never reset, and keys
    that only exist in the target are kept.  Neither input is mutated.

    Returns:
        SyncOutcome with the merged tree and the number of leaves created.
    """
    replaced = []
    if isinstance(baseline, Node):
        if isinstance(target, Node):
            updated, added = _merge_node(baseline, target, (), replaced)
        else:
            log.warning("Target root is not an object — rebuilding from baseline")
            replaced.append("")
            updated = empty_mirror(baseline)
            added = leaf_count(updated)
        return SyncOutcome(updated, added, replaced)

    # Baseline leaf: whatever the target holds stays as-is
    return SyncOutcome(copy_tree(target), 0, replaced)


def _merge_node(baseline: Node, target: Node, path: tuple,
                replaced: list) -> tuple:
    merged = Node({k: copy_tree(v) for k, v in target.children.items()})
    added = 0
    for key, base_value in baseline.children.items():
        here = path + (key,)
        if key not in target.children:
            template = empty_mirror(base_value)
            merged.children[key] = template
            added += leaf_count(template)
            continue

        if not isinstance(base_value, Node):
            continue

        existing = target.children[key]
        if isinstance(existing, Node):
            child, child_added = _merge_node(base_value, existing, here, replaced)
            merged.children[key] = child
            added += child_added
        else:
            log.warning("Type mismatch at %s — replacing leaf with baseline structure",
                        join_path(here))
            template = empty_mirror(base_value)
            merged.children[key] = template
            added += leaf_count(template)
            replaced.append(join_path(here))
    return merged, added

