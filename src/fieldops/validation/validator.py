"""Validation module for verifying expanded duties and reordered routes.

This module is the single place where the engine's output invariants are
checked: instances belong to the date they were expanded for, and a
reordered route contains exactly the visits of the original with
prerequisites placed first.
"""

from collections import Counter
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional

from fieldops.domain.models import ScheduleInstance, WorkerRoute


class ValidationErrorType(Enum):
    """Types of validation errors."""

    INSTANCE_WRONG_DATE = "instance_wrong_date"
    INSTANCE_NON_POSITIVE_DURATION = "instance_non_positive_duration"
    SEQUENCE_MISSING = "sequence_missing"
    SEQUENCE_ADDED = "sequence_added"
    SEQUENCE_DUPLICATED = "sequence_duplicated"
    DEPENDENCY_ORDER_VIOLATED = "dependency_order_violated"
    WORKER_MISMATCH = "worker_mismatch"


@dataclass
class ValidationError:
    """A single validation error."""

    error_type: ValidationErrorType
    message: str
    item_id: Optional[str] = None
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        parts = [f"[{self.error_type.value}]"]
        if self.item_id:
            parts.append(f"{self.item_id}:")
        parts.append(self.message)
        return " ".join(parts)


@dataclass
class ValidationResult:
    """Result of a validation run."""

    is_valid: bool
    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add_error(self, error: ValidationError) -> None:
        """Add an error and mark as invalid."""
        self.errors.append(error)
        self.is_valid = False

    def add_warning(self, warning: str) -> None:
        """Add a warning (doesn't affect validity)."""
        self.warnings.append(warning)


class ScheduleValidator:
    """Validates engine output against its invariants.

    Example:
        >>> validator = ScheduleValidator()
        >>> result = validator.validate_reordered_route(route, optimized)
        >>> if not result.is_valid:
        ...     for error in result.errors:
        ...         print(error)
    """

    def validate_instances(
        self,
        instances: list[ScheduleInstance],
        on_date: date,
    ) -> ValidationResult:
        """Validate instances expanded for a date.

        Args:
            instances: Instances to check.
            on_date: The date they were expanded for.

        Returns:
            ValidationResult with is_valid flag and any errors.
        """
        result = ValidationResult(is_valid=True)

        for instance in instances:
            if instance.start_time.date() != on_date:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.INSTANCE_WRONG_DATE,
                        message=(
                            f"Starts on {instance.start_time.date()}, "
                            f"expected {on_date}"
                        ),
                        item_id=instance.id,
                    )
                )
            if instance.end_time <= instance.start_time:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.INSTANCE_NON_POSITIVE_DURATION,
                        message="End time is not after start time",
                        item_id=instance.id,
                        details={"duration_minutes": instance.duration_minutes},
                    )
                )

        return result

    def validate_reordered_route(
        self,
        original: WorkerRoute,
        reordered: WorkerRoute,
    ) -> ValidationResult:
        """Validate a reordered route against the route it came from.

        Dependency order is only enforced when every dependency points at a
        visit in the route and there are no cycles; otherwise forced
        placement is allowed to break it and a warning is recorded instead.

        Args:
            original: Route before reordering.
            reordered: Route after reordering.

        Returns:
            ValidationResult for the reordering.
        """
        result = ValidationResult(is_valid=True)

        if original.worker_id != reordered.worker_id:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.WORKER_MISMATCH,
                    message=f"Worker changed from {original.worker_id} to {reordered.worker_id}",
                    item_id=reordered.id,
                )
            )

        self._validate_same_sequences(original, reordered, result)
        self._validate_anchor_order(original, reordered, result)
        self._validate_dependency_order(reordered, result)

        return result

    def _validate_same_sequences(
        self,
        original: WorkerRoute,
        reordered: WorkerRoute,
        result: ValidationResult,
    ) -> None:
        """Check that the multiset of sequence ids is unchanged."""
        before = Counter(original.sequence_ids)
        after = Counter(reordered.sequence_ids)

        for seq_id in before:
            if seq_id not in after:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.SEQUENCE_MISSING,
                        message="Sequence dropped by reordering",
                        item_id=seq_id,
                    )
                )
        for seq_id, count in after.items():
            if seq_id not in before:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.SEQUENCE_ADDED,
                        message="Sequence not present in the original route",
                        item_id=seq_id,
                    )
                )
            elif count > before[seq_id]:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.SEQUENCE_DUPLICATED,
                        message=f"Appears {count} times, expected {before[seq_id]}",
                        item_id=seq_id,
                    )
                )

    def _validate_anchor_order(
        self,
        original: WorkerRoute,
        reordered: WorkerRoute,
        result: ValidationResult,
    ) -> None:
        """Warn when non-flexible visits changed their relative order."""
        before = [s.id for s in original.sequences if not s.is_flexible]
        after = [s.id for s in reordered.sequences if not s.is_flexible]
        if before != after:
            result.add_warning(
                f"Anchor order changed from {before} to {after} "
                f"(anchors with dependencies may move)"
            )

    def _validate_dependency_order(
        self,
        route: WorkerRoute,
        result: ValidationResult,
    ) -> None:
        """Check prerequisites are placed first when that is achievable."""
        positions = {s.id: i for i, s in enumerate(route.sequences)}

        dangling = sorted(
            {
                dep
                for s in route.sequences
                for dep in s.dependencies
                if dep not in positions
            }
        )
        if dangling:
            result.add_warning(f"Dependencies outside the route: {dangling}")

        cyclic = self._find_cyclic(route)
        if cyclic:
            result.add_warning(f"Dependency cycle among: {sorted(cyclic)}")

        if dangling or cyclic:
            return

        for sequence in route.sequences:
            for dep in sequence.dependencies:
                if positions[dep] > positions[sequence.id]:
                    result.add_error(
                        ValidationError(
                            error_type=ValidationErrorType.DEPENDENCY_ORDER_VIOLATED,
                            message=f"Placed before its dependency {dep}",
                            item_id=sequence.id,
                            details={
                                "position": positions[sequence.id],
                                "dependency_position": positions[dep],
                            },
                        )
                    )

    @staticmethod
    def _find_cyclic(route: WorkerRoute) -> set[str]:
        """Ids of sequences that can reach themselves through dependencies."""
        graph = {s.id: list(s.dependencies) for s in route.sequences}
        cyclic = set()
        for start in graph:
            stack = list(graph[start])
            seen = set()
            while stack:
                node = stack.pop()
                if node == start:
                    cyclic.add(start)
                    break
                if node in seen or node not in graph:
                    continue
                seen.add(node)
                stack.extend(graph[node])
        return cyclic
