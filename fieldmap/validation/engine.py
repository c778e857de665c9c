# fieldmap/validation/engine.py
from __future__ import annotations
import threading
from concurrent.futures import Executor, Future
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence, Tuple

from fieldmap import logging as slog
from fieldmap.compatibility import CompatibilityPolicy, DefaultPolicy
from fieldmap.interfaces import (
    Field,
    FieldMapping,
    PassState,
    TargetSchema,
    ValidationResult,
    ValidationStatus,
    ValidationSummary,
)
from .validator import validate_all, summarize_results

Observer = Callable[["ValidationPass"], None]
FixHandler = Callable[[str, str], None]


class ValidationPass:
    """
    One evaluation of a mapping set against a field tree and a schema.

    Inputs are captured as immutable snapshots when the pass starts; results
    are filled in only if the pass completes while still the latest one.
    """

    def __init__(self, generation: int, mappings: Tuple[FieldMapping, ...],
                 fields: Tuple[Field, ...], schema: TargetSchema):
        self.generation = generation
        self.mappings = mappings
        self.fields = fields
        self.schema = schema
        self.state = PassState.RUNNING
        self.results: Tuple[ValidationResult, ...] = ()
        self.summary: Optional[ValidationSummary] = None
        self.completed_at: Optional[datetime] = None
        self.future: Optional[Future] = None

    def wait(self, timeout: Optional[float] = None) -> "ValidationPass":
        if self.future is not None:
            self.future.result(timeout)
        return self

    def __repr__(self) -> str:
        return f"<ValidationPass #{self.generation} {self.state.value} mappings={len(self.mappings)}>"


def _snapshot_schema(schema: TargetSchema) -> TargetSchema:
    return TargetSchema({table: tuple(cols) for table, cols in schema.tables.items()})


class MappingValidationEngine:
    """
    Continuous validation of a live mapping set ("latest wins").

    Every validate_now() stamps a new generation and supersedes the pass still
    running, if any. A finished pass is delivered to observers only when its
    generation is still the latest issued; stale results are dropped. Passes
    run inline, or on ``executor`` when one is given.
    """

    def __init__(self, policy: Optional[CompatibilityPolicy] = None, *,
                 executor: Optional[Executor] = None,
                 on_fix: Optional[FixHandler] = None,
                 auto_validate: bool = True):
        self.policy = policy or DefaultPolicy()
        self.auto_validate = auto_validate
        self._executor = executor
        self._on_fix = on_fix
        self._observers: List[Observer] = []
        self._generation = 0
        self._current: Optional[ValidationPass] = None
        self._latest: Optional[ValidationPass] = None
        # guards the generation counter and compare-and-deliver; re-entrant so
        # observers may start a new pass from their callback
        self._lock = threading.RLock()

    # --------------------------- observers ---------------------------

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    # --------------------------- passes ---------------------------

    @property
    def state(self) -> PassState:
        return self._current.state if self._current is not None else PassState.IDLE

    @property
    def generation(self) -> int:
        return self._generation

    def validate_now(self, mappings: Sequence[FieldMapping], fields: Sequence[Field],
                     schema: TargetSchema) -> ValidationPass:
        with self._lock:
            self._generation += 1
            vp = ValidationPass(self._generation, tuple(mappings), tuple(fields), _snapshot_schema(schema))
            prev = self._current
            if prev is not None and prev.state is PassState.RUNNING:
                prev.state = PassState.SUPERSEDED
                slog.log_debug(f"{prev!r} superseded by #{vp.generation}")
            self._current = vp

        if self._executor is None:
            self._run(vp)
            return vp
        try:
            vp.future = self._executor.submit(self._run, vp)
        except Exception as e:
            slog.log_err(f"Could not schedule validation pass #{vp.generation}: {e}")
            self._complete(vp, (), ValidationSummary(status="error", errors=(f"Validation pass failed: {e}",)))
        return vp

    def mappings_changed(self, mappings: Sequence[FieldMapping], fields: Sequence[Field],
                         schema: TargetSchema) -> Optional[ValidationPass]:
        """Hook for the mapping editor: schedules a pass unless auto-validation is off."""
        if not self.auto_validate:
            return None
        return self.validate_now(mappings, fields, schema)

    def _run(self, vp: ValidationPass) -> None:
        try:
            results = tuple(validate_all(vp.mappings, vp.fields, vp.schema, self.policy))
            summary = summarize_results(results)
        except Exception as e:
            results = ()
            summary = ValidationSummary(status="error", errors=(f"Validation pass failed: {e}",))
        self._complete(vp, results, summary)

    def _complete(self, vp: ValidationPass, results: Tuple[ValidationResult, ...],
                  summary: ValidationSummary) -> None:
        with self._lock:
            if vp.generation != self._generation:
                vp.state = PassState.SUPERSEDED
                slog.log_debug(f"discarding stale validation pass #{vp.generation} (latest #{self._generation})")
                return

            vp.results = results
            vp.summary = summary
            vp.completed_at = datetime.now(timezone.utc)
            vp.state = PassState.COMPLETED
            self._latest = vp
            slog.log_debug(f"validation pass #{vp.generation} completed: {summary.status} ({summary.total} mapping(s))")

            for observer in list(self._observers):
                # an observer may have started a newer pass
                if vp.generation != self._generation:
                    slog.log_debug(f"stopping delivery of {vp!r}, pass #{self._generation} already delivered")
                    break
                try:
                    observer(vp)
                except Exception as e:
                    slog.log_err(f"Validation observer failed: {e}")

    # --------------------------- latest results ---------------------------

    @property
    def latest(self) -> Optional[ValidationPass]:
        return self._latest

    @property
    def results(self) -> Tuple[ValidationResult, ...]:
        return self._latest.results if self._latest else ()

    @property
    def summary(self) -> ValidationSummary:
        if self._latest is None or self._latest.summary is None:
            return ValidationSummary()
        return self._latest.summary

    @property
    def is_validating(self) -> bool:
        return self.state is PassState.RUNNING

    @property
    def last_validated(self) -> Optional[datetime]:
        return self._latest.completed_at if self._latest else None

    @property
    def has_errors(self) -> bool:
        return any(r.status in (ValidationStatus.ERROR, ValidationStatus.MISSING) for r in self.results)

    @property
    def has_warnings(self) -> bool:
        return any(r.status is ValidationStatus.WARNING for r in self.results)

    def get_mapping_validation(self, mapping_id: str) -> Optional[ValidationResult]:
        for r in self.results:
            if r.mapping.id == mapping_id:
                return r
        return None

    # --------------------------- advisory ---------------------------

    def on_mapping_fix(self, mapping_id: str, fix: str) -> None:
        """Forward a suggested remediation to the host. Changes nothing here."""
        if self._on_fix is None:
            return
        try:
            self._on_fix(mapping_id, fix)
        except Exception as e:
            slog.log_err(f"Fix handler failed for mapping '{mapping_id}': {e}")
