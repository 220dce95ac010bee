"""Merging of near-duplicate entries within a meal group."""

from collections.abc import Iterable

from nutrition_diary.domain.entries import ConsolidatedItem, FoodEntry

CALORIE_TOLERANCE_KCAL = 5.0


def consolidate(entries: Iterable[FoodEntry]) -> list[ConsolidatedItem]:
    """Collapse repeated entries into counted rows, keeping first-seen order.

    An entry joins the first existing row with the same product name whose
    representative (its first member) is within the calorie tolerance. Rows
    are never re-merged, so the grouping is not transitive.
    """
    items: list[ConsolidatedItem] = []
    for entry in entries:
        match = _find_match(items, entry)
        if match is None:
            items.append(
                ConsolidatedItem(
                    representative=entry,
                    count=1,
                    total_calories_kcal=entry.calories_kcal,
                    member_ids=[entry.id],
                )
            )
            continue
        match.count += 1
        match.total_calories_kcal += entry.calories_kcal
        match.member_ids.append(entry.id)
    return items


def _find_match(
    items: list[ConsolidatedItem], entry: FoodEntry
) -> ConsolidatedItem | None:
    for item in items:
        representative = item.representative
        if (
            representative.product_name == entry.product_name
            and abs(representative.calories_kcal - entry.calories_kcal)
            < CALORIE_TOLERANCE_KCAL
        ):
            return item
    return None
