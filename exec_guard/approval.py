"""
Human Approval Gate
===================

Holds actions that passed validation until a human approves or denies
them, denying by default when nobody answers in time.

This module provides:
- ApprovalKind: terminal / code / critical_action
- ApprovalRequest: What is being asked, with a human-readable summary
- ApprovalHandle: Single-resolution handle the caller awaits
- ApprovalGate: Registry of pending approvals keyed by id

A handle resolves exactly once. The first resolve() wins and later calls
return False. A timed-out handle is resolved False and removed from the
gate, so no approval outlives its request.

Usage:
    gate = ApprovalGate(timeout_seconds=120)
    handle = gate.request("agent-1", ApprovalKind.TERMINAL, "List files",
                          command="ls -la")
    notify_user(handle.request.summary(), handle.approval_id)

    # elsewhere, when the user clicks a button
    gate.resolve(approval_id, approved=True)

    # in the agent
    if await handle.wait():
        run_command()
"""

from __future__ import annotations

import asyncio
import logging
import secrets
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from .constants import DEFAULT_APPROVAL_TIMEOUT_SECONDS, DEFAULT_CODE_LANGUAGE

logger = logging.getLogger(__name__)

# Preview limits used in request summaries
COMMAND_PREVIEW_CHARS = 500
CODE_PREVIEW_CHARS = 800


class ApprovalKind(str, Enum):
    """What a pending approval is for."""

    TERMINAL = "terminal"
    CODE = "code"
    CRITICAL_ACTION = "critical_action"


class ApprovalStatus(str, Enum):
    """Lifecycle state of an approval."""

    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"
    EXPIRED = "expired"


def generate_approval_id() -> str:
    """Generate an id of the form approval-<epoch ms>-<hex>."""
    return f"approval-{int(time.time() * 1000)}-{secrets.token_hex(3)}"


@dataclass
class ApprovalRequest:
    """
    A request for human approval.

    Attributes:
        approval_id: Unique id the human's answer refers to
        agent_id: Agent asking for approval
        kind: Terminal command, code snippet or other critical action
        reason: The agent's stated reason
        command / code / language: The action (depending on kind)
        action_label / action_details: Description of a critical action
        created_at: Epoch milliseconds
    """

    approval_id: str
    agent_id: str
    kind: ApprovalKind
    reason: str
    command: str | None = None
    code: str | None = None
    language: str | None = None
    action_label: str | None = None
    action_details: str | None = None
    created_at: int = field(default_factory=lambda: int(time.time() * 1000))

    def summary(self) -> str:
        """
        Render the request for a human reviewer.

        Commands are cut at 500 characters and code at 800.
        """
        if self.kind == ApprovalKind.TERMINAL:
            title = "Terminal command"
        elif self.kind == ApprovalKind.CODE:
            title = "Code execution"
        else:
            title = self.action_label or "Critical action"

        detail = ""
        if self.kind == ApprovalKind.TERMINAL and self.command:
            detail = self.command[:COMMAND_PREVIEW_CHARS]
        elif self.kind == ApprovalKind.CODE and self.code:
            language = self.language or DEFAULT_CODE_LANGUAGE
            preview = self.code
            if len(preview) > CODE_PREVIEW_CHARS:
                preview = preview[:CODE_PREVIEW_CHARS] + "\n... (code truncated)"
            detail = f"Language: {language}\n{preview}"
        elif self.kind == ApprovalKind.CRITICAL_ACTION:
            detail = (self.action_details or "").strip() or "Sensitive action requested by the agent."

        return "\n".join([
            f"{title} - approval requested",
            f"Reason: {self.reason}",
            "",
            detail,
        ])

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict (for UIs and notifications)."""
        return {
            "approval_id": self.approval_id,
            "agent_id": self.agent_id,
            "kind": self.kind.value,
            "reason": self.reason,
            "command": self.command,
            "code": self.code,
            "language": self.language,
            "action_label": self.action_label,
            "action_details": self.action_details,
            "created_at": self.created_at,
        }


class ApprovalHandle:
    """
    Single-resolution handle for one pending approval.

    Created by ApprovalGate.request(); never construct directly.
    """

    def __init__(self, gate: "ApprovalGate", request: ApprovalRequest, timeout_seconds: float):
        self._gate = gate
        self.request = request
        self.timeout_seconds = timeout_seconds
        self.status = ApprovalStatus.PENDING
        self._deadline = gate._clock() + timeout_seconds
        self._event = asyncio.Event()

    @property
    def approval_id(self) -> str:
        return self.request.approval_id

    @property
    def resolved(self) -> bool:
        return self.status != ApprovalStatus.PENDING

    @property
    def approved(self) -> bool:
        return self.status == ApprovalStatus.APPROVED

    @property
    def overdue(self) -> bool:
        """True if still pending after the deadline passed."""
        return not self.resolved and self._gate._clock() >= self._deadline

    def _settle(self, status: ApprovalStatus) -> bool:
        if self.resolved:
            logger.debug(f"Approval {self.approval_id} already {self.status.value}, ignoring")
            return False
        self.status = status
        self._gate._discard(self.approval_id)
        self._event.set()
        return True

    def resolve(self, approved: bool) -> bool:
        """
        Resolve the approval.

        Args:
            approved: The human's answer

        Returns:
            True if this call resolved the handle, False if it was already
            resolved (or expired)
        """
        if self.overdue:
            self.expire()
            return False
        settled = self._settle(ApprovalStatus.APPROVED if approved else ApprovalStatus.DENIED)
        if settled:
            logger.info(
                f"Approval {self.approval_id} for agent {self.request.agent_id}: "
                f"{'APPROVED' if approved else 'DENIED'}"
            )
        return settled

    def expire(self) -> bool:
        """Deny the approval because nobody answered in time."""
        settled = self._settle(ApprovalStatus.EXPIRED)
        if settled:
            logger.info(
                f"Approval {self.approval_id} timed out after {self.timeout_seconds:g}s, denying"
            )
        return settled

    async def wait(self) -> bool:
        """
        Wait for the answer.

        Returns:
            True only if a human approved before the deadline
        """
        if not self.resolved:
            remaining = max(0.0, self._deadline - self._gate._clock())
            try:
                await asyncio.wait_for(self._event.wait(), timeout=remaining)
            except asyncio.TimeoutError:
                self.expire()
        return self.approved


class ApprovalGate:
    """
    Registry of pending approvals.

    Args:
        timeout_seconds: Seconds before an unanswered approval is denied
        clock: Monotonic clock returning seconds (time.monotonic by default)

    Example:
        gate = ApprovalGate()
        handle = gate.request("agent-1", "terminal", "Clean build", command="make clean")
        gate.resolve(handle.approval_id, True)
        assert await handle.wait()
    """

    def __init__(
        self,
        timeout_seconds: float = DEFAULT_APPROVAL_TIMEOUT_SECONDS,
        clock: Callable[[], float] | None = None,
    ):
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        self.timeout_seconds = timeout_seconds
        self._clock = clock or time.monotonic
        self._pending: dict[str, ApprovalHandle] = {}

    def request(
        self,
        agent_id: str,
        kind: ApprovalKind | str,
        reason: str,
        command: str | None = None,
        code: str | None = None,
        language: str | None = None,
        action_label: str | None = None,
        action_details: str | None = None,
        approval_id: str | None = None,
    ) -> ApprovalHandle:
        """
        Register a new pending approval.

        Returns:
            Handle to await

        Raises:
            ValueError: If ``approval_id`` is already pending or ``kind`` is unknown
        """
        approval_id = approval_id or generate_approval_id()
        if approval_id in self._pending:
            raise ValueError(f"Approval {approval_id} is already pending")

        request = ApprovalRequest(
            approval_id=approval_id,
            agent_id=agent_id,
            kind=ApprovalKind(kind),
            reason=reason,
            command=command,
            code=code,
            language=language,
            action_label=action_label,
            action_details=action_details,
        )
        handle = ApprovalHandle(self, request, self.timeout_seconds)
        self._pending[approval_id] = handle
        logger.info(f"Approval {approval_id} requested by agent {agent_id} ({request.kind.value})")
        return handle

    def get(self, approval_id: str) -> ApprovalHandle | None:
        """Pending handle for an id, if any."""
        self._expire_overdue()
        return self._pending.get(approval_id)

    def resolve(self, approval_id: str, approved: bool) -> bool:
        """
        Resolve a pending approval by id.

        Returns:
            False for unknown, already resolved or expired ids
        """
        self._expire_overdue()
        handle = self._pending.get(approval_id)
        if handle is None:
            logger.debug(f"Approval {approval_id} is not pending")
            return False
        return handle.resolve(approved)

    def pending(self) -> list[ApprovalRequest]:
        """Open requests, oldest first."""
        self._expire_overdue()
        return [handle.request for handle in self._pending.values()]

    def deny_all(self) -> int:
        """
        Deny every pending approval (e.g., on shutdown).

        Returns:
            Number of approvals denied
        """
        self._expire_overdue()
        handles = list(self._pending.values())
        return sum(1 for handle in handles if handle.resolve(False))

    def _expire_overdue(self) -> None:
        for handle in [h for h in self._pending.values() if h.overdue]:
            handle.expire()

    def _discard(self, approval_id: str) -> None:
        self._pending.pop(approval_id, None)

    def __len__(self) -> int:
        self._expire_overdue()
        return len(self._pending)
