"""
PATH: sales/services/steps.py

PIPELINE STEP OUTCOMES

Each pipeline step is either:
- required: a storage failure aborts the pipeline as DependencyFailure
  carrying the step name
- best_effort: runs in a savepoint; a failure is logged, recorded as a
  failed StepOutcome and the pipeline continues

Callers inspect StepRunner.outcomes / degraded to tell a degraded but
successful run from a clean one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from django.core.exceptions import ObjectDoesNotExist, ValidationError
from django.db import DatabaseError, transaction

from pos.services.exceptions import DependencyFailure, POSError

logger = logging.getLogger(__name__)

REQUIRED = "required"
BEST_EFFORT = "best_effort"

STORAGE_ERRORS = (DatabaseError, ObjectDoesNotExist, ValidationError, ValueError)


@dataclass
class StepOutcome:
    name: str
    kind: str
    ok: bool = True
    error: str = ""

    def as_dict(self) -> dict:
        return {"name": self.name, "kind": self.kind, "ok": self.ok, "error": self.error}


class StepRunner:
    def __init__(self, pipeline: str, **context):
        self.pipeline = pipeline
        self.context = {k: str(v) for k, v in context.items()}
        self.outcomes: list[StepOutcome] = []

    def required(self, name: str, fn, *args, **kwargs):
        try:
            with transaction.atomic():
                result = fn(*args, **kwargs)
        except POSError:
            raise
        except STORAGE_ERRORS as exc:
            self.outcomes.append(StepOutcome(name=name, kind=REQUIRED, ok=False, error=str(exc)))
            logger.error(
                "Required pipeline step failed",
                extra={"pipeline": self.pipeline, "step": name, "error": str(exc), **self.context},
            )
            raise DependencyFailure(f"{name} failed: {exc}", step=name) from exc

        self.outcomes.append(StepOutcome(name=name, kind=REQUIRED))
        return result

    def best_effort(self, name: str, fn, *args, **kwargs):
        try:
            with transaction.atomic():
                result = fn(*args, **kwargs)
        except Exception as exc:
            self.outcomes.append(StepOutcome(name=name, kind=BEST_EFFORT, ok=False, error=str(exc)))
            logger.warning(
                "Best-effort pipeline step degraded",
                extra={"pipeline": self.pipeline, "step": name, "error": str(exc), **self.context},
            )
            return None

        self.outcomes.append(StepOutcome(name=name, kind=BEST_EFFORT))
        return result

    def skipped(self, name: str, reason: str):
        self.outcomes.append(StepOutcome(name=name, kind=BEST_EFFORT, ok=False, error=reason))

    @property
    def degraded(self) -> list[str]:
        return [o.name for o in self.outcomes if not o.ok]
