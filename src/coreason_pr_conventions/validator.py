# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_pr_conventions

from typing import List, Optional, Sequence, Tuple

from coreason_pr_conventions.config import Settings
from coreason_pr_conventions.domain.models import PullRequestMetadata, ValidationResult
from coreason_pr_conventions.events import EventEmitter, EventType, LoguruEmitter, ValidationEvent
from coreason_pr_conventions.rules.checks import DEFAULT_CHECKS, Check


class ConventionValidator:
    """
    Runs every enabled rule group against one pull request.

    Rule groups are independent: a failing group never stops the others, so a
    contributor sees every violation from a single run. The validator does no
    I/O and leaves exit codes to the caller.
    """

    def __init__(
        self,
        settings: Settings,
        checks: Optional[Sequence[Tuple[str, Check]]] = None,
        event_emitter: Optional[EventEmitter] = None,
    ) -> None:
        self.settings = settings
        self.checks: List[Tuple[str, Check]] = list(checks if checks is not None else DEFAULT_CHECKS)
        self.event_emitter = event_emitter or LoguruEmitter()

    def enabled_checks(self) -> List[Tuple[str, Check]]:
        return [(name, check) for name, check in self.checks if name in self.settings.checks_enabled]

    def validate(self, metadata: PullRequestMetadata) -> ValidationResult:
        """
        Evaluates the enabled rule groups in order.

        Args:
            metadata: Fully resolved pull request metadata.

        Returns:
            ValidationResult with one message per evaluated rule group.
        """
        self.event_emitter.emit(
            ValidationEvent(
                type=EventType.RUN_START,
                message="Validating pull request conventions",
                payload={"number": metadata.number, "branch": metadata.branch_name},
            )
        )

        result = ValidationResult()
        for name, check in self.enabled_checks():
            self.event_emitter.emit(
                ValidationEvent(type=EventType.CHECK_RUNNING, message=f"Running {name} check", payload={"check": name})
            )
            message = check(metadata, self.settings)
            result.messages.append(message)
            self.event_emitter.emit(
                ValidationEvent(
                    type=EventType.CHECK_RESULT,
                    message=message.text,
                    payload={"check": name, "status": message.severity.value, "details": message.details},
                )
            )

        self.event_emitter.emit(
            ValidationEvent(
                type=EventType.RUN_END,
                message="All conventions passed" if result.passed else "Convention violations found",
                payload={"passed": result.passed, "failed": [m.check for m in result.failures]},
            )
        )
        return result
