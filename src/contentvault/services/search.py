from typing import List, Sequence

from contentvault.models import ContentItem


def matches(item: ContentItem, query: str) -> bool:
    needle = query.lower()
    if needle in item.content.lower():
        return True
    if any(needle in tag.lower() for tag in item.tags):
        return True
    return needle in item.type.value.lower()


def filter_items(items: Sequence[ContentItem], query: str) -> List[ContentItem]:
    """Case-insensitive substring filter over content, tags and type name.

    An empty query returns every item. Whitespace is not trimmed, so a query of
    spaces only keeps items containing spaces. Matching items keep their order.
    """
    if not query:
        return list(items)
    return [item for item in items if matches(item, query)]
