"""Record walker.

Walks the fields of a dataclass or pydantic model instance, reads each
field's tag text, and hands integer fields to the resolver for their
width.  Nested records are walked recursively; fields of any other
type are left alone.  Records must be mutable: frozen dataclasses and
frozen pydantic models are rejected up front.

Tag text is a comma separated list of ``key=value`` entries:

    @dataclass
    class Page:
        size: Annotated[int, Tag("min=1,max=100,def=20"), INT16] = 20
        offset: int | None = field(default=None, metadata={"san": "def=0"})
"""

from __future__ import annotations

import dataclasses
import logging
import types
from dataclasses import dataclass, field
from typing import Annotated, Any, Iterator, Union, get_args, get_origin, get_type_hints

from pydantic import BaseModel

from bounds import Bounds, for_bits
from errors import SanitizeError
from factory import ResolverFactory
from handles import AttributeHandle, FieldHandle
from resolver import IntFieldResolver, Outcome
from settings import SanitizerSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Tag:
    """Tag text attached to a field through ``typing.Annotated``."""

    text: str


# ---------------------------------------------------------------------------
# Report
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FieldResult:
    path: str
    outcome: Outcome | None
    error: SanitizeError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class SanitizeReport:
    results: list[FieldResult] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return all(r.ok for r in self.results)

    @property
    def failures(self) -> list[FieldResult]:
        return [r for r in self.results if not r.ok]

    def outcome(self, path: str) -> Outcome | None:
        for r in self.results:
            if r.path == path:
                return r.outcome
        raise KeyError(path)

    def summary(self) -> str:
        total = len(self.results)
        failed = len(self.failures)
        if failed == 0:
            return f"All {total} fields resolved"
        lines = [f"{failed}/{total} fields failed:"]
        for f in self.failures:
            lines.append(f"  [{type(f.error).__name__}] {f.path}: {f.error}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Field introspection
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class _FieldInfo:
    name: str
    base: Any
    optional: bool
    tag: str | None
    bounds: Bounds | None


def _unwrap(tp: Any) -> tuple[Any, bool, list[Any]]:
    """Strip Annotated and Optional from a type: (base, optional, extras)."""
    extras: list[Any] = []
    optional = False
    if get_origin(tp) is Annotated:
        extras.extend(tp.__metadata__)
        tp = get_args(tp)[0]
    if get_origin(tp) in (Union, types.UnionType):
        args = get_args(tp)
        rest = [a for a in args if a is not type(None)]
        if len(rest) == 1 and len(rest) < len(args):
            optional = True
            tp = rest[0]
            if get_origin(tp) is Annotated:
                extras.extend(tp.__metadata__)
                tp = get_args(tp)[0]
    return tp, optional, extras


def _info(name: str, tp: Any, extras: list[Any], tag_text: str | None) -> _FieldInfo:
    base, optional, more = _unwrap(tp)
    extras = list(extras) + more
    for item in extras:
        if isinstance(item, Tag):
            tag_text = item.text
            break
    bounds = next((item for item in extras if isinstance(item, Bounds)), None)
    return _FieldInfo(name=name, base=base, optional=optional, tag=tag_text, bounds=bounds)


def _is_record(value: Any) -> bool:
    if isinstance(value, BaseModel):
        return True
    return dataclasses.is_dataclass(value) and not isinstance(value, type)


def _record_fields(record: Any, tag_name: str) -> Iterator[_FieldInfo]:
    if isinstance(record, BaseModel):
        for name, info in type(record).model_fields.items():
            extra = info.json_schema_extra if isinstance(info.json_schema_extra, dict) else {}
            yield _info(name, info.annotation, list(info.metadata), extra.get(tag_name))
        return

    hints = get_type_hints(type(record), include_extras=True)
    for f in dataclasses.fields(record):
        yield _info(f.name, hints.get(f.name, f.type), [], f.metadata.get(tag_name))


# ---------------------------------------------------------------------------
# Sanitizer
# ---------------------------------------------------------------------------

class Sanitizer:
    """Applies field tags to records."""

    def __init__(self, settings: SanitizerSettings | None = None) -> None:
        self.settings = settings or SanitizerSettings()

    def field_tags(self, raw: str) -> dict[str, str]:
        """Split tag text into a key -> value map.

        Bare entries map to an empty string.  Values are kept verbatim so
        a malformed number still fails to parse.
        """
        tags: dict[str, str] = {}
        for entry in raw.split(","):
            if not entry.strip():
                continue
            key, sep, value = entry.partition("=")
            tags[key.strip()] = value if sep else ""
        return tags

    def resolver_for(self, bounds: Bounds) -> IntFieldResolver:
        if self.settings.verify_resolvers:
            return ResolverFactory.get(
                bounds,
                samples=self.settings.verify_samples,
                seed=self.settings.verify_seed,
            )
        return IntFieldResolver(bounds=bounds)

    def resolve(
        self,
        handle: FieldHandle,
        raw_tags: str,
        bounds: Bounds,
        path: str,
        report: SanitizeReport | None = None,
    ) -> FieldResult:
        """Resolve one field, applying the configured error policy."""
        tags = self.field_tags(raw_tags)
        try:
            outcome = self.resolver_for(bounds).resolve(handle, tags, path)
        except SanitizeError as e:
            if self.settings.on_error == "raise":
                raise
            logger.warning("skipping field %s: %s", path, e)
            result = FieldResult(path=path, outcome=None, error=e)
        else:
            result = FieldResult(path=path, outcome=outcome)
        if report is not None:
            report.results.append(result)
        return result

    def sanitize(self, record: Any) -> SanitizeReport:
        """Resolve every tagged integer field of ``record`` in place.

        Frozen records anywhere in the tree are rejected before any field
        is written.  A record reached a second time, through a cycle or a
        shared reference, is resolved only once.
        """
        if not _is_record(record):
            raise TypeError(
                f"expected a dataclass or pydantic model instance, got {type(record).__name__}"
            )
        for path, nested in _nested_records(record, type(record).__name__, set()):
            if _is_frozen(nested):
                raise TypeError(f"record '{path}' is frozen and can not be sanitized")
        report = SanitizeReport()
        self._walk(record, "", report, set())
        return report

    def _walk(
        self, record: Any, prefix: str, report: SanitizeReport, seen: set[int]
    ) -> None:
        seen.add(id(record))
        for info in _record_fields(record, self.settings.tag_name):
            path = prefix + info.name
            value = getattr(record, info.name)

            if _is_record(value):
                if id(value) not in seen:
                    self._walk(value, path + ".", report, seen)
                continue
            if info.base is not int or info.tag is None:
                continue
            if value is None and not info.optional:
                raise TypeError(f"field '{path}' is not optional but holds None")

            bounds = info.bounds or for_bits(self.settings.default_bits)
            handle = AttributeHandle(record, info.name, optional=info.optional)
            self.resolve(handle, info.tag, bounds, path, report)


def _nested_records(record: Any, path: str, seen: set[int]) -> Iterator[tuple[str, Any]]:
    """Every record reachable from ``record``, each once, with its path."""
    seen.add(id(record))
    yield path, record
    for name in _field_names(record):
        value = getattr(record, name)
        if _is_record(value) and id(value) not in seen:
            yield from _nested_records(value, f"{path}.{name}", seen)


def _field_names(record: Any) -> list[str]:
    if isinstance(record, BaseModel):
        return list(type(record).model_fields)
    return [f.name for f in dataclasses.fields(record)]


def _is_frozen(record: Any) -> bool:
    if isinstance(record, BaseModel):
        return bool(type(record).model_config.get("frozen", False))
    return type(record).__dataclass_params__.frozen


def sanitize(record: Any, settings: SanitizerSettings | None = None) -> SanitizeReport:
    return Sanitizer(settings).sanitize(record)
