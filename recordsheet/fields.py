"""Field discovery and classification for record types."""

from __future__ import annotations

import dataclasses
import functools
import logging
import operator
import re
import types
import typing
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
from pydantic import BaseModel

from .models import FieldDescriptor, NumericKind, ValueKind

LOGGER = logging.getLogger(__name__)

_CAMEL_BOUNDARY = re.compile(r"([a-z])([A-Z])")

NUMERIC_TYPES: Dict[Any, NumericKind] = {
    Decimal: NumericKind.DECIMAL,
    float: NumericKind.DOUBLE,
    np.float64: NumericKind.DOUBLE,
    np.float32: NumericKind.SINGLE,
    int: NumericKind.INT64,
    np.int64: NumericKind.INT64,
    np.int32: NumericKind.INT32,
    np.int16: NumericKind.INT16,
    np.int8: NumericKind.INT8,
    np.uint8: NumericKind.INT8,
}

_BOOLEAN_TYPES = (bool, np.bool_)


@functools.lru_cache(maxsize=1024)
def format_label(name: str) -> str:
    """Turn a field name into a column header.

    A space is inserted at every lowercase to uppercase transition
    (``ProductName`` becomes ``Product Name``). Uppercase runs and digits do
    not split. Snake case names, single lowercase words included, become
    capitalized words (``unit_price`` becomes ``Unit Price``, ``rating``
    becomes ``Rating``).
    """
    if "_" in name.strip("_") or name.islower():
        words = [word[:1].upper() + word[1:] for word in name.split("_") if word]
        return " ".join(_CAMEL_BOUNDARY.sub(r"\1 \2", word) for word in words)
    return _CAMEL_BOUNDARY.sub(r"\1 \2", name)


def is_id_field(name: str) -> bool:
    """Return True when ``name`` follows the ``...Id`` / ``..._id`` naming convention."""
    return name.lower().endswith("id")


def unwrap_optional(declared_type: Any) -> Tuple[Any, bool]:
    """Strip ``Optional[...]`` / ``X | None`` from a declared type.

    Returns:
        The underlying type and whether the declaration allowed ``None``.
    """
    origin = typing.get_origin(declared_type)
    if origin is typing.Annotated:
        return unwrap_optional(typing.get_args(declared_type)[0])
    if origin is typing.Union or origin is types.UnionType:
        members = [arg for arg in typing.get_args(declared_type) if arg is not type(None)]
        nullable = len(members) != len(typing.get_args(declared_type))
        if len(members) == 1:
            inner, _ = unwrap_optional(members[0])
            return inner, nullable
        return declared_type, nullable
    return declared_type, False


def classify(value_type: Any) -> Tuple[ValueKind, Optional[NumericKind]]:
    """Map a declared (already unwrapped) type to its display and numeric kind."""
    if value_type in _BOOLEAN_TYPES:
        return ValueKind.BOOLEAN, None
    numeric_kind = NUMERIC_TYPES.get(value_type)
    if numeric_kind is not None:
        return numeric_kind.value_kind, numeric_kind
    if isinstance(value_type, type):
        if issubclass(value_type, datetime):
            return ValueKind.DATETIME, None
        if issubclass(value_type, date):
            return ValueKind.DATE, None
    return ValueKind.TEXT, None


class FieldExtractor:
    """Discover the exportable fields of a record type."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        """Create a new field extractor."""
        self.logger = logger or LOGGER

    def extract(self, record_type: type, exclude_id_fields: bool = False) -> List[FieldDescriptor]:
        """Build field descriptors for every public readable attribute of ``record_type``.

        Fields are reported in declaration order: model or dataclass fields
        and class annotations first, then public properties.

        Args:
            record_type: Dataclass, pydantic model or annotated class.
            exclude_id_fields: Drop fields whose name ends in ``id`` (any case).

        Returns:
            Ordered list of field descriptors, possibly empty.
        """
        descriptors: List[FieldDescriptor] = []
        for name, declared_type in self._discover(record_type):
            if exclude_id_fields and is_id_field(name):
                self.logger.debug("Excluding id field %s.%s", record_type.__name__, name)
                continue
            descriptors.append(self._describe(name, declared_type))
        return descriptors

    def format_label(self, name: str) -> str:
        """Return the column header for ``name``."""
        return format_label(name)

    def _describe(self, name: str, declared_type: Any) -> FieldDescriptor:
        value_type, nullable = unwrap_optional(declared_type)
        value_kind, numeric_kind = classify(value_type)
        return FieldDescriptor(
            name=name,
            declared_type=declared_type,
            value_type=value_type,
            nullable=nullable,
            label=format_label(name),
            value_kind=value_kind,
            numeric_kind=numeric_kind,
            accessor=operator.attrgetter(name),
        )

    def _discover(self, record_type: type) -> List[Tuple[str, Any]]:
        discovered: Dict[str, Any] = {}

        # Model annotations are already resolved by pydantic.
        if isinstance(record_type, type) and issubclass(record_type, BaseModel):
            for name, info in record_type.model_fields.items():
                discovered[name] = info.annotation if info.annotation is not None else Any
        elif dataclasses.is_dataclass(record_type):
            hints = self._type_hints(record_type)
            for item in dataclasses.fields(record_type):
                discovered[item.name] = hints.get(item.name, item.type)
        else:
            for name, declared_type in self._type_hints(record_type).items():
                if typing.get_origin(declared_type) is typing.ClassVar:
                    continue
                discovered[name] = declared_type

        for name, declared_type in self._properties(record_type).items():
            discovered.setdefault(name, declared_type)

        return [
            (name, declared_type)
            for name, declared_type in discovered.items()
            if not name.startswith("_")
        ]

    def _properties(self, record_type: type) -> Dict[str, Any]:
        properties: Dict[str, Any] = {}
        for klass in reversed(getattr(record_type, "__mro__", ())):
            if klass is object or klass is BaseModel:
                continue
            for name, attribute in vars(klass).items():
                if isinstance(attribute, property) and attribute.fget is not None:
                    getter = attribute.fget
                elif isinstance(attribute, functools.cached_property):
                    getter = attribute.func
                else:
                    continue
                properties[name] = self._type_hints(getter).get("return", Any)
        return properties

    def _type_hints(self, target: Any) -> Dict[str, Any]:
        try:
            return typing.get_type_hints(target)
        except (NameError, TypeError) as exc:
            self.logger.warning(
                "Could not resolve type hints for %r (%s); unresolved fields are treated as text.",
                target,
                exc,
            )
            hints: Dict[str, Any] = {}
            for owner in reversed(getattr(target, "__mro__", (target,))):
                for name, annotation in (getattr(owner, "__annotations__", {}) or {}).items():
                    hints[name] = self._resolve_annotation(owner, name, annotation)
            return hints

    @staticmethod
    def _resolve_annotation(owner: Any, name: str, annotation: Any) -> Any:
        """Resolve one annotation in ``owner``'s namespace; unresolvable ones stay as written."""
        holder = type(
            "_Hint", (), {"__annotations__": {name: annotation}, "__module__": owner.__module__}
        )
        localns = dict(vars(owner)) if isinstance(owner, type) else None
        try:
            return typing.get_type_hints(holder, localns=localns)[name]
        except (NameError, TypeError):
            return annotation
