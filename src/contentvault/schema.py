from datetime import datetime
from typing import Dict, List, Optional

from pydantic import Base64Bytes, BaseModel, Field

from contentvault.clipboard import CaptureEvent, CapturedFile
from contentvault.models import ContentItem, ContentType, Layout, Preferences
from contentvault.services.ingestion import IngestResult, IngestStatus


class CaptureFile(BaseModel):
    mime: str
    data: Base64Bytes
    name: str = ""


class CaptureRequest(BaseModel):
    representations: Dict[str, str] = Field(default_factory=dict)
    files: List[CaptureFile] = Field(default_factory=list)

    def to_event(self) -> CaptureEvent:
        return CaptureEvent(
            representations=dict(self.representations),
            files=tuple(CapturedFile.from_bytes(f.mime, f.data, name=f.name)
                        for f in self.files),
        )


class Item(BaseModel):
    id: str
    type: ContentType
    content: str
    tags: List[str]
    createdAt: datetime

    @classmethod
    def from_item(cls, item: ContentItem) -> "Item":
        return cls(id=item.id, type=item.type, content=item.content,
                   tags=list(item.tags), createdAt=item.created_at)


class CaptureResponse(BaseModel):
    status: IngestStatus
    item: Optional[Item] = None
    error: Optional[str] = None

    @classmethod
    def from_result(cls, result: IngestResult) -> "CaptureResponse":
        item = Item.from_item(result.item) if result.item is not None else None
        return cls(status=result.status, item=item, error=result.error)


class QueryUpdate(BaseModel):
    query: str


class PreferencesModel(BaseModel):
    darkMode: bool = True
    layout: Layout = Layout.GRID

    @classmethod
    def from_preferences(cls, preferences: Preferences) -> "PreferencesModel":
        return cls(darkMode=preferences.dark_mode, layout=preferences.layout)


class PreferencesUpdate(BaseModel):
    darkMode: Optional[bool] = None
    layout: Optional[Layout] = None
