"""탭 선택 화면(picker)에 보여줄 url/title/favicon"""
from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class HistoryItem:
    """엔진 히스토리의 한 항목"""
    url: Optional[str] = None
    title: Optional[str] = None
    favicon: Any = None


@dataclass
class PickerData:
    url: Optional[str] = None
    title: Optional[str] = None
    favicon: Any = None

    @classmethod
    def from_item(cls, item: Optional[HistoryItem]) -> "PickerData":
        data = cls()
        if item is not None:
            data.url = item.url
            data.title = item.title or item.url
            data.favicon = item.favicon
        return data
