"""Combined password policy: composition rules, dictionary and breach checks."""

from dataclasses import dataclass, field

from loguru import logger

from portal_api.lib.password_policy.breach import (
    LABEL_BREACHED,
    LABEL_UNAVAILABLE,
    BreachChecker,
    BreachServiceError,
)
from portal_api.lib.password_policy.dictionary import LABEL_DICTIONARY, find_dictionary_words
from portal_api.lib.password_policy.rules import check_password_rules

FAILURE_PREFIX = "Password requirements not met: "


def format_failures(failures: list[str]) -> str:
    """Render failed requirement labels as one user-facing message."""
    return FAILURE_PREFIX + ", ".join(failures)


@dataclass
class PasswordAssessment:
    """Outcome of a policy evaluation."""

    failures: list[str] = field(default_factory=list)
    breach_checked: bool = False

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def message(self) -> str | None:
        return format_failures(self.failures) if self.failures else None


class PasswordPolicy:
    """Evaluates candidate passwords.

    Args:
        min_length: Minimum length for the composition rules.
        dictionary_check: Whether to run the zxcvbn dictionary check.
        breach_checker: Range API client, or None to skip the breach check.
        block_on_upstream_failure: When the breach service cannot answer,
            fail the password (True) or let it pass (False).
    """

    def __init__(
        self,
        *,
        min_length: int = 12,
        dictionary_check: bool = True,
        breach_checker: BreachChecker | None = None,
        block_on_upstream_failure: bool = False,
    ) -> None:
        self.min_length = min_length
        self.dictionary_check = dictionary_check
        self.breach_checker = breach_checker
        self.block_on_upstream_failure = block_on_upstream_failure

    async def evaluate(self, password: str) -> PasswordAssessment:
        """Run every configured check and collect the failures."""
        assessment = PasswordAssessment(failures=check_password_rules(password, self.min_length))

        if self.dictionary_check and find_dictionary_words(password):
            assessment.failures.append(LABEL_DICTIONARY)

        if self.breach_checker is not None:
            try:
                breached = await self.breach_checker.is_breached(password)
            except BreachServiceError as e:
                if self.block_on_upstream_failure:
                    logger.warning(f"Breach check unavailable, rejecting password: {e.message}")
                    assessment.failures.append(LABEL_UNAVAILABLE)
                else:
                    logger.warning(f"Breach check unavailable, allowing password: {e.message}")
            else:
                assessment.breach_checked = True
                if breached:
                    assessment.failures.append(LABEL_BREACHED)

        return assessment
