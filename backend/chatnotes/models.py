"""Persisted state for chatnotes.

Defined once here, referenced everywhere else. Everything in this module is
serialized into the single JSON state document, using camelCase keys:

    {"settings": {...}, "importedArchives": {...}, "conversationCatalog": {...}}
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ImportSettings(CamelModel):
    archive_folder: str = "AI Chat Imports"
    add_date_prefix: bool = False
    date_format: Literal["YYYY-MM-DD", "YYYYMMDD"] = "YYYY-MM-DD"
    incremental_save: bool = False  # persist after every conversation, not only per archive


class CatalogEntry(CamelModel):
    conversation_id: str
    path: str
    update_time: float  # last revision reconciled
    provider: str = "chatgpt"


class ImportedArchiveRecord(CamelModel):
    file_name: str
    date: str  # ISO 8601 import time


class StateDocument(CamelModel):
    settings: ImportSettings = Field(default_factory=ImportSettings)
    imported_archives: dict[str, ImportedArchiveRecord] = Field(default_factory=dict)
    conversation_catalog: dict[str, CatalogEntry] = Field(default_factory=dict)
