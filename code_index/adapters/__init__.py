from .base import BaseAdapter, Chapter, Jurisdiction, JurisdictionResult, Title
from .flat_list import FlatListAdapter
from .multi_book import MultiBookAdapter
from .static_tree import StaticTreeAdapter
from .title_chapter_html import TitleChapterHtmlAdapter
from .tree_nav import TreeNavAdapter

ADAPTERS: dict[str, type[BaseAdapter]] = {
    cls.platform: cls
    for cls in (
        TreeNavAdapter,
        MultiBookAdapter,
        FlatListAdapter,
        TitleChapterHtmlAdapter,
        StaticTreeAdapter,
    )
}

__all__ = [
    "ADAPTERS",
    "BaseAdapter",
    "Chapter",
    "Jurisdiction",
    "JurisdictionResult",
    "Title",
    "TreeNavAdapter",
    "MultiBookAdapter",
    "FlatListAdapter",
    "TitleChapterHtmlAdapter",
    "StaticTreeAdapter",
]
