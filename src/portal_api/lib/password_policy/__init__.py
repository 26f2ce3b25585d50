"""Password strength and breach policy.

Public API:
    - PasswordPolicy: configurable evaluator combining all checks
    - PasswordAssessment: evaluation result
    - BreachChecker / BreachServiceError: range API client
    - check_password_rules / has_sequential_digits: synchronous rules
    - find_dictionary_words: zxcvbn dictionary detection
"""

from portal_api.lib.password_policy.breach import BreachChecker, BreachServiceError, split_digest
from portal_api.lib.password_policy.dictionary import find_dictionary_words
from portal_api.lib.password_policy.policy import PasswordAssessment, PasswordPolicy, format_failures
from portal_api.lib.password_policy.rules import check_password_rules, has_sequential_digits

__all__ = [
    "BreachChecker",
    "BreachServiceError",
    "PasswordAssessment",
    "PasswordPolicy",
    "check_password_rules",
    "find_dictionary_words",
    "format_failures",
    "has_sequential_digits",
    "split_digest",
]
