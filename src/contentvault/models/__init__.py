from contentvault.models.content_item import ContentItem, ContentType, new_item_id
from contentvault.models.preferences import Layout, Preferences

__all__ = [
    'ContentItem',
    'ContentType',
    'Layout',
    'Preferences',
    'new_item_id',
]
