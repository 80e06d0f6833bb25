"""Engine exceptions."""

from typing import Optional
from pydantic import BaseModel


class SetupViolation(BaseModel):
    """A single setup rule violation detected before the game starts."""

    rule_id: str  # e.g., "S.1"
    message: str  # Human-readable description
    context: Optional[dict] = None


class GameSetupError(Exception):
    """Raised when a game cannot be initialized or started.

    Setup errors are the only errors the engine propagates to callers;
    everything that goes wrong mid-game is recovered locally.
    """

    def __init__(self, violations: list[SetupViolation]):
        self.violations = violations
        super().__init__(f"Game setup failed with {len(violations)} violation(s)")

    def __str__(self) -> str:
        if not self.violations:
            return "GameSetupError(no violations)"
        lines = [f"GameSetupError({len(self.violations)} violations):"]
        for v in self.violations:
            lines.append(f"  {v.rule_id}: {v.message}")
        return "\n".join(lines)
