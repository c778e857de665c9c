# fieldmap/extractor.py
from __future__ import annotations
import numbers
from collections.abc import Mapping
from typing import Any, Iterator, List, Optional, Tuple, Union

from fieldmap import logging as slog
from fieldmap.interfaces import (
    NULLISH_TAGS,
    PRIMITIVE_TAGS,
    UNDEFINED,
    ExtractionOptions,
    ExtractionResult,
    Field,
    Statistics,
    TypeDetector,
    TypeTag,
)
from fieldmap.naming import NameDisambiguator
from fieldmap.paths import address
from fieldmap.statistics import summarize

ROOT_FIELD_NAME = "root_value"
NULL_FIELD_NAME = "null_value"
ARRAY_INFO_NAME = "array_info"


def detect_type(value: Any) -> TypeTag:
    """Default classifier: maps a decoded JSON value onto its TypeTag."""
    if value is None:
        return TypeTag.NULL
    if value is UNDEFINED:
        return TypeTag.UNDEFINED
    if isinstance(value, (list, tuple)):
        return TypeTag.ARRAY
    if isinstance(value, Mapping):
        return TypeTag.OBJECT
    # bool before Number: bool is an int subclass
    if isinstance(value, bool):
        return TypeTag.BOOLEAN
    if isinstance(value, numbers.Number):
        return TypeTag.NUMBER
    if isinstance(value, str):
        return TypeTag.STRING
    raise TypeError(f"Unsupported value type: {type(value).__name__}")


def _coerce_tag(raw: Any) -> Optional[TypeTag]:
    if isinstance(raw, TypeTag):
        return raw
    try:
        return TypeTag(raw)
    except ValueError:
        return None


class _Frame:
    """One object/array being walked; children are pulled one at a time."""
    __slots__ = ("kind", "value", "segments", "depth", "entries", "fields", "pending", "failed")

    def __init__(self, kind: TypeTag, value: Any, segments: List[str], depth: int, entries: Iterator):
        self.kind = kind
        self.value = value
        self.segments = segments
        self.depth = depth
        self.entries = entries
        self.fields: List[Field] = []
        self.pending: Optional[Tuple[str, TypeTag, str]] = None
        self.failed = False


class _ExtractionContext:
    """
    State for a single extract() call: the pass-wide name set plus the
    error/warning sinks. Walks the value with an explicit stack so that
    max_depth, not the interpreter's recursion limit, bounds the traversal.
    """

    def __init__(self, options: ExtractionOptions, detector: TypeDetector):
        self.options = options
        self.detector = detector
        self.names = NameDisambiguator()
        self.errors: List[str] = []
        self.warnings: List[str] = []

    def classify(self, value: Any) -> Optional[TypeTag]:
        return _coerce_tag(self.detector(value))

    def run(self, root: Any, root_tag: Optional[TypeTag]) -> Tuple[Field, ...]:
        start = self._visit(root, [], 0, root_tag)
        if not isinstance(start, _Frame):
            return tuple(start)

        stack: List[_Frame] = [start]
        while stack:
            frame = stack[-1]
            child = self._advance(frame)
            if child is not None:
                stack.append(child)
                continue

            stack.pop()
            produced = self._finish(frame)
            if not stack:
                return produced
            name, tag, path = frame.pending
            stack[-1].fields.append(Field(name, tag, path, produced))
        return ()

    def _visit(self, value: Any, segments: List[str], depth: int,
               tag: Optional[TypeTag]) -> Union[_Frame, List[Field]]:
        path = address(segments)
        if depth > self.options.max_depth:
            self.warnings.append(f"Maximum depth ({self.options.max_depth}) reached at path: {path}")
            return []

        if tag is TypeTag.OBJECT:
            try:
                entries = iter(list(value.items()))
            except Exception as e:
                self.errors.append(f"Error processing object at path {path}: {e}")
                return []
            return _Frame(tag, value, segments, depth, entries)

        if tag is TypeTag.ARRAY:
            try:
                length = len(value)
            except Exception as e:
                self.errors.append(f"Error processing array at path {path}: {e}")
                return []
            limit = self.options.array_index_limit
            processed = length if limit == 0 else min(limit, length)
            if processed < length:
                self.warnings.append(
                    f"Processing only first {processed} elements of array at path: {path} (total: {length})"
                )
            return _Frame(tag, value, segments, depth, iter(range(processed)))

        if tag in PRIMITIVE_TAGS:
            return []

        if tag in NULLISH_TAGS:
            if self.options.include_null_values:
                return [Field(self.names.unique(NULL_FIELD_NAME), tag, path)]
            return []

        self.warnings.append(f"Unknown data type '{self.detector(value)}' at path: {path}")
        return []

    def _next_entry(self, frame: _Frame) -> Optional[Tuple[str, str, Any]]:
        """(segment, raw name, value) of the next child, or None when done or broken."""
        try:
            item = next(frame.entries)
            if frame.kind is TypeTag.OBJECT:
                key, value = item
                return str(key), str(key), value
            return str(item), f"item_{item}", frame.value[item]
        except StopIteration:
            return None
        except Exception as e:
            frame.failed = True
            self.errors.append(f"Error processing {frame.kind.value} at path {address(frame.segments)}: {e}")
            return None

    def _advance(self, frame: _Frame) -> Optional[_Frame]:
        while True:
            entry = self._next_entry(frame)
            if entry is None:
                return None
            segment, raw_name, value = entry
            child_segments = frame.segments + [segment]
            child_path = address(child_segments)

            tag = self.classify(value)
            if tag is None:
                self.warnings.append(f"Unknown data type '{self.detector(value)}' at path: {child_path}")
                continue

            name = self.names.unique(raw_name)
            child = self._visit(value, child_segments, frame.depth + 1, tag)
            if isinstance(child, _Frame):
                child.pending = (name, tag, child_path)
                return child
            frame.fields.append(Field(name, tag, child_path, tuple(child)))

    def _finish(self, frame: _Frame) -> Tuple[Field, ...]:
        if frame.kind is TypeTag.ARRAY and not frame.failed:
            length_path = address(frame.segments + ["length"])
            info = Field(
                self.names.unique(ARRAY_INFO_NAME),
                TypeTag.OBJECT,
                length_path,
                (
                    Field(self.names.unique("length"), TypeTag.NUMBER, length_path),
                    Field(self.names.unique("processed_count"), TypeTag.NUMBER,
                          address(frame.segments + ["processed_count"])),
                ),
            )
            frame.fields.append(info)
        return tuple(frame.fields)


def _root_value_result(tag: TypeTag) -> ExtractionResult:
    return ExtractionResult(
        fields=(Field(ROOT_FIELD_NAME, tag, "$"),),
        statistics=Statistics(total_fields=1, primitive_fields=1),
    )


def extract(data: Any, options: Optional[ExtractionOptions] = None) -> ExtractionResult:
    """
    Turn a decoded JSON value into a field catalog.

    Never raises: bad input, per-container failures and unexpected errors all
    come back as strings in ``errors``; bounded subtrees and truncated arrays
    as strings in ``warnings``.
    """
    opts = options or ExtractionOptions()
    detector = opts.custom_type_detector or detect_type

    try:
        if data is None or data is UNDEFINED:
            return ExtractionResult(errors=("Input data is null or undefined",))

        ctx = _ExtractionContext(opts, detector)
        root_tag = ctx.classify(data)
        if root_tag in PRIMITIVE_TAGS or root_tag in NULLISH_TAGS:
            return _root_value_result(root_tag)

        fields = ctx.run(data, root_tag)
        stats = summarize(fields)
        slog.log_debug(
            f"extracted {len(fields)} top-level field(s), "
            f"{len(ctx.warnings)} warning(s), {len(ctx.errors)} error(s)"
        )
        return ExtractionResult(fields, tuple(ctx.errors), tuple(ctx.warnings), stats)

    except Exception as e:
        slog.log_debug(f"extraction aborted: {e!r}")
        return ExtractionResult(errors=(f"Fatal error during field extraction: {e}",))
