from typing import Iterable, Iterator, Mapping

from budgetcore.domain import PieSlice

OTHERS = "Others"


def iter_nonzero(amounts: Mapping[str, float]) -> Iterator[tuple[str, float]]:
    for name, value in amounts.items():
        if value > 0:
            yield name, value


def ranked(amounts: Mapping[str, float]) -> list[tuple[str, float]]:
    # sorted() is stable, so ties keep category order
    return sorted(iter_nonzero(amounts), key=lambda item: item[1], reverse=True)


def pie_buckets(amounts: Mapping[str, float], max_slices: int = 5) -> tuple[PieSlice, ...]:
    """Keep a category chart legible.

    Up to ``max_slices`` non-zero categories are returned as they are, largest
    first. Beyond that the top ``max_slices - 1`` are kept and the rest are
    summed into one "Others" slice.
    """
    entries = ranked(amounts)
    if len(entries) <= max_slices:
        return tuple(PieSlice(name, value) for name, value in entries)

    head = entries[: max_slices - 1]
    rest = sum(value for _, value in entries[max_slices - 1:])
    return tuple(PieSlice(name, value) for name, value in head) + (PieSlice(OTHERS, rest),)


def top_categories(amounts: Mapping[str, float], k: int) -> Iterable[tuple[str, float]]:
    for name, value in ranked(amounts)[: max(0, k)]:
        yield name, value
