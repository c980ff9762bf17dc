"""Translation completeness accounting."""

import math
from dataclasses import dataclass
from typing import Optional

from .tree import Leaf, Node, Tree


def percentage(translated: int, total: int) -> int:
    """Whole-number completion percentage, halves rounded up."""
    if total <= 0:
        return 0
    return int(math.floor(translated * 100 / total + 0.5))


@dataclass
class TranslationStats:
    """Leaf counts for one file or one whole language."""
    total: int = 0
    translated: int = 0
    empty: int = 0

    @property
    def percentage(self) -> int:
        return percentage(self.translated, self.total)

    def __add__(self, other: "TranslationStats") -> "TranslationStats":
        return TranslationStats(
            total=self.total + other.total,
            translated=self.translated + other.translated,
            empty=self.empty + other.empty,
        )

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "translated": self.translated,
            "empty": self.empty,
            "percentage": self.percentage,
        }


def count_keys(tree: Tree, baseline: Optional[Tree] = None) -> TranslationStats:
    """Classify every leaf of ``tree`` as translated or empty.

    A leaf is translated when it is non-empty and either no baseline is
    given (the tree is the baseline itself) or it differs from the
    baseline leaf at the same path.  A copy identical to the baseline
    text counts as empty.
    """
    stats = TranslationStats()
    _count(tree, baseline, stats)
    return stats


def _count(tree: Tree, baseline: Optional[Tree], stats: TranslationStats):
    if isinstance(tree, Node):
        for key, value in tree.children.items():
            base_value = baseline.get(key) if isinstance(baseline, Node) else None
            if isinstance(value, Node):
                _count(value, base_value if isinstance(base_value, Node) else None, stats)
            else:
                _count_leaf(value, base_value, stats)
    else:
        _count_leaf(tree, baseline, stats)


def _count_leaf(leaf: Leaf, base_value: Optional[Tree], stats: TranslationStats):
    stats.total += 1
    if leaf.is_empty:
        stats.empty += 1
    elif isinstance(base_value, Leaf) and base_value.value == leaf.value:
        stats.empty += 1
    else:
        stats.translated += 1
