"""
Per-rep issue accumulator.

Holds the single worst form deviation seen since the current rep phase
began. A candidate replaces the held issue only when its priority is
strictly greater, so when the rep completes the tracker holds the
highest-priority issue observed, not the last one.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from formcheck.engine.catalog import Classification, FormRule


@dataclass(frozen=True)
class FormIssue:
    """Candidate feedback for the in-progress rep."""
    message: str
    classification: Classification
    priority: int

    @classmethod
    def from_rule(cls, form_rule: FormRule) -> "FormIssue":
        return cls(
            message=form_rule.message,
            classification=form_rule.classification,
            priority=form_rule.priority,
        )


class IssueTracker:
    """Retains at most one issue: the highest priority offered since reset."""

    def __init__(self):
        self._held: Optional[FormIssue] = None

    @property
    def held(self) -> Optional[FormIssue]:
        return self._held

    def offer(self, issue: FormIssue) -> bool:
        """Keep the issue if it outranks the held one. Returns True if kept."""
        if self._held is None or issue.priority > self._held.priority:
            self._held = issue
            return True
        return False

    def offer_rules(self, rules: Iterable[FormRule]) -> None:
        for form_rule in rules:
            self.offer(FormIssue.from_rule(form_rule))

    def take(self) -> Optional[FormIssue]:
        """Return the held issue and clear the tracker for the next rep."""
        issue, self._held = self._held, None
        return issue

    def reset(self):
        self._held = None
