"""
Result types returned by notification and moderation operations.

A result carries the primary outcome together with the non-fatal failures of
best-effort side effects (token cleanup, audit writes, mark-as-sent), so a
caller can inspect both without confusing a side-effect failure with the
operation failing.
"""

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class SideEffectFailure:
    """A best-effort sub-step that failed without failing its operation."""

    operation: str  # "token_cleanup", "audit", "mark_sent", "delivery"
    target: str
    error: str

    def describe(self) -> str:
        return f"{self.operation} failed for {self.target}: {self.error}"


@dataclass(frozen=True)
class DeliveryOutcome:
    """Gateway result for a single device token."""

    token: str
    success: bool
    error_code: Optional[str] = None
    message_id: Optional[str] = None


@dataclass
class DeliveryResult:
    """Outcome of notifying one user on all of their devices."""

    user_id: str
    outcomes: list[DeliveryOutcome] = field(default_factory=list)
    invalidated_tokens: list[str] = field(default_factory=list)
    side_effect_failures: list[SideEffectFailure] = field(default_factory=list)

    @property
    def attempted(self) -> int:
        return len(self.outcomes)

    @property
    def succeeded(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.success)

    @property
    def skipped(self) -> bool:
        """True when the user had no devices to notify."""
        return not self.outcomes


@dataclass
class FanOutResult:
    """Outcome of notifying every recipient of one event."""

    results: list[DeliveryResult] = field(default_factory=list)
    # Failures of event-level follow-ups such as marking a record sent
    event_failures: list[SideEffectFailure] = field(default_factory=list)

    @property
    def recipients(self) -> list[str]:
        return [result.user_id for result in self.results]

    @property
    def side_effect_failures(self) -> list[SideEffectFailure]:
        per_user = [f for result in self.results for f in result.side_effect_failures]
        return per_user + self.event_failures

    def summary(self) -> dict[str, Any]:
        """Compact, JSON-friendly view used in trigger responses and logs."""
        return {
            "recipients": self.recipients,
            "attempted": sum(r.attempted for r in self.results),
            "succeeded": sum(r.succeeded for r in self.results),
            "invalidatedTokens": sum(len(r.invalidated_tokens) for r in self.results),
            "warnings": [f.describe() for f in self.side_effect_failures],
        }


@dataclass
class ActionResult:
    """Outcome of one privileged moderation action."""

    action: str
    data: dict[str, Any] = field(default_factory=dict)
    side_effect_failures: list[SideEffectFailure] = field(default_factory=list)
    success: bool = True

    def to_response(self) -> dict[str, Any]:
        """Shape returned by the RPC endpoints: ``{success, ...data, warnings}``."""
        return {
            "success": self.success,
            **self.data,
            "warnings": [f.describe() for f in self.side_effect_failures],
        }
