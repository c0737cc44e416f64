"""
Record metadata - Read-only schema information used while resolving columns.

The grid never owns schema definitions; it asks a MetadataProvider for the
description of a field (display label, kind, primary-identifier flag, option
labels) and of a record type. Providers must be side-effect free and may
return None.

Providers:
- StaticMetadataProvider: in-memory definitions (from dict or YAML file)
- CachedMetadataProvider: TTL cache in front of any provider
"""

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Protocol, Union

import yaml
from cachetools import TTLCache

from ..constants import METADATA_CACHE_MAXSIZE, METADATA_CACHE_TTL_S
from .records import AliasedValue

logger = logging.getLogger(__name__)


class FieldKind(Enum):
    """Kind of a field as declared by its metadata."""
    STRING = "string"
    INTEGER = "integer"
    DECIMAL = "decimal"
    DOUBLE = "double"
    MONEY = "money"
    DATETIME = "datetime"
    BOOLEAN = "boolean"
    LOOKUP = "lookup"
    CHOICE = "choice"
    UNIQUEIDENTIFIER = "uniqueidentifier"
    OTHER = "other"

    @classmethod
    def parse(cls, value: Any) -> "FieldKind":
        if isinstance(value, FieldKind):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.OTHER


@dataclass(frozen=True)
class FieldMetadata:
    """Description of one field of one record type."""
    logical_name: str
    type_name: str
    display_name: Optional[str] = None
    kind: FieldKind = FieldKind.STRING
    is_primary_id: bool = False
    options: Mapping[int, str] = field(default_factory=dict)

    @property
    def is_datetime(self) -> bool:
        return self.kind is FieldKind.DATETIME

    def option_label(self, code: int) -> Optional[str]:
        return self.options.get(code)


@dataclass(frozen=True)
class TypeMetadata:
    """Description of a record type."""
    logical_name: str
    display_name: Optional[str] = None
    primary_id_attribute: Optional[str] = None
    primary_name_attribute: Optional[str] = None


class MetadataProvider(Protocol):
    """Read-only metadata lookup service."""

    def get_field_meta(self, type_name: str, field_name: str,
                       sample_value: Any = None) -> Optional[FieldMetadata]:
        ...

    def get_type_meta(self, type_name: str) -> Optional[TypeMetadata]:
        ...


class StaticMetadataProvider:
    """
    In-memory metadata provider.

    Field lookups honour aliased samples: when the sample value is an
    AliasedValue, the field is looked up on the alias origin type and
    attribute instead of the requested name.

    Usage:
        provider = StaticMetadataProvider.from_yaml("metadata.yaml")
        meta = provider.get_field_meta("contact", "email")
    """

    def __init__(self):
        self._types: Dict[str, TypeMetadata] = {}
        self._fields: Dict[str, Dict[str, FieldMetadata]] = {}

    def add_type(self, type_meta: TypeMetadata) -> None:
        self._types[type_meta.logical_name] = type_meta
        self._fields.setdefault(type_meta.logical_name, {})

    def add_field(self, field_meta: FieldMetadata) -> None:
        self._fields.setdefault(field_meta.type_name, {})[field_meta.logical_name] = field_meta

    def get_type_meta(self, type_name: str) -> Optional[TypeMetadata]:
        return self._types.get(type_name)

    def get_field_meta(self, type_name: str, field_name: str,
                       sample_value: Any = None) -> Optional[FieldMetadata]:
        if isinstance(sample_value, AliasedValue) and sample_value.type_name:
            return self._fields.get(sample_value.type_name, {}).get(sample_value.attribute_name)
        return self._fields.get(type_name, {}).get(field_name)

    @classmethod
    def from_dict(cls, data: Mapping) -> "StaticMetadataProvider":
        """
        Build a provider from a mapping.

        Expected shape:
            types:
              contact:
                display_name: Contact
                primary_id: contactid
                primary_name: fullname
                fields:
                  contactid: {kind: uniqueidentifier, display_name: Contact}
                  statuscode:
                    kind: choice
                    display_name: Status
                    options: {1: Active, 2: Inactive}
        """
        provider = cls()
        for type_name, type_data in (data.get("types") or {}).items():
            type_data = type_data or {}
            primary_id = type_data.get("primary_id")
            provider.add_type(TypeMetadata(
                logical_name=type_name,
                display_name=type_data.get("display_name"),
                primary_id_attribute=primary_id,
                primary_name_attribute=type_data.get("primary_name"),
            ))
            for field_name, field_data in (type_data.get("fields") or {}).items():
                field_data = field_data or {}
                options = {int(k): str(v) for k, v in (field_data.get("options") or {}).items()}
                provider.add_field(FieldMetadata(
                    logical_name=field_name,
                    type_name=type_name,
                    display_name=field_data.get("display_name"),
                    kind=FieldKind.parse(field_data.get("kind", "string")),
                    is_primary_id=field_data.get("primary_id", field_name == primary_id),
                    options=options,
                ))
        return provider

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "StaticMetadataProvider":
        """Load definitions from a YAML file (see from_dict for the shape)."""
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        provider = cls.from_dict(data)
        logger.info(f"Loaded metadata for {len(provider._types)} types from {path}")
        return provider


class CachedMetadataProvider:
    """
    Cached wrapper around a MetadataProvider.

    Caches lookups with TTL expiration. Field lookups for aliased samples are
    keyed on the alias origin so different aliases of the same field share
    one entry.
    """

    DEFAULT_TTL = METADATA_CACHE_TTL_S
    DEFAULT_MAXSIZE = METADATA_CACHE_MAXSIZE

    def __init__(self, provider: MetadataProvider,
                 ttl: int = DEFAULT_TTL, maxsize: int = DEFAULT_MAXSIZE):
        """
        Initialize cached provider.

        Args:
            provider: Provider to delegate to on cache misses
            ttl: Cache time-to-live in seconds
            maxsize: Maximum number of cached entries
        """
        self._provider = provider
        self._cache = TTLCache(maxsize=maxsize, ttl=ttl)
        self._lock = threading.RLock()

    def _get_cached(self, key: tuple, loader) -> Any:
        with self._lock:
            if key in self._cache:
                return self._cache[key]
            result = loader()
            self._cache[key] = result
            return result

    def get_field_meta(self, type_name: str, field_name: str,
                       sample_value: Any = None) -> Optional[FieldMetadata]:
        if isinstance(sample_value, AliasedValue) and sample_value.type_name:
            key = ("field", sample_value.type_name, sample_value.attribute_name)
        else:
            key = ("field", type_name, field_name)
        return self._get_cached(
            key, lambda: self._provider.get_field_meta(type_name, field_name, sample_value))

    def get_type_meta(self, type_name: str) -> Optional[TypeMetadata]:
        return self._get_cached(("type", type_name),
                                lambda: self._provider.get_type_meta(type_name))

    def invalidate(self) -> None:
        """Clear entire cache."""
        with self._lock:
            self._cache.clear()
