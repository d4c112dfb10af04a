"""
identity_core.auth.password_policy

Password policy validation.

Responsibilities:
- Check a candidate password (and optional confirmation) against the policy.
- Report the first failing rule as a value, never as an exception.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass

MIN_LENGTH = 6

# Uppercase run, then lowercase run, then digit run, anywhere in the string.
_REQUIREMENTS = re.compile(r"[A-Z]+[a-z]+[0-9]+")


class PolicyReason(enum.StrEnum):
    too_short = "too_short"
    confirmation_mismatch = "confirmation_mismatch"
    requirements_not_met = "requirements_not_met"


@dataclass(frozen=True, slots=True)
class PolicyViolation:
    reason: PolicyReason


def check_password_policy(pwd: str | None, confirm_pwd: str | None = None) -> PolicyViolation | None:
    """
    Returns None when the password is acceptable.

    Order matters: length, then confirmation, then character requirements.
    """

    if not pwd or len(pwd) < MIN_LENGTH:
        return PolicyViolation(PolicyReason.too_short)
    if confirm_pwd and confirm_pwd != pwd:
        return PolicyViolation(PolicyReason.confirmation_mismatch)
    if _REQUIREMENTS.search(pwd) is None:
        return PolicyViolation(PolicyReason.requirements_not_met)
    return None
