"""
RELGRAPH Subset Enumeration

Enumerates fixed-size subsets of an ordered sequence by include/exclude
recursion. Used for every pairwise analysis of a table's columns.
"""

from typing import Iterator, List, Sequence, Tuple, TypeVar

T = TypeVar("T")


def subsets_of_size(items: Sequence[T], size: int) -> Iterator[Tuple[T, ...]]:
    """
    Lazily yield every ``size``-element subset of ``items``.

    Each position is first included, then excluded, so subsets come out in
    lexicographic order of input positions and keep the input order inside
    each subset. Walks all 2**n include/exclude paths; n is a column count.

    Args:
        items (Sequence[T]): Distinct items
        size (int): Subset size

    Yields:
        Tuple[T, ...]: One subset
    """
    n = len(items)
    chosen: List[T] = []

    def search(i: int) -> Iterator[Tuple[T, ...]]:
        if i == n:
            if len(chosen) == size:
                yield tuple(chosen)
            return
        chosen.append(items[i])
        yield from search(i + 1)
        chosen.pop()
        yield from search(i + 1)

    return search(0)


def pairs(items: Sequence[T]) -> Iterator[Tuple[T, T]]:
    """Every unordered pair of ``items``, earlier element first."""
    return subsets_of_size(items, 2)
