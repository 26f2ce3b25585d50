"""Synchronous password composition rules."""

import string

SYMBOLS = frozenset('!@#$%^&*(),.?":{}|<>_+=-')
SEQUENTIAL_RUN_LENGTH = 4
# the one run that wraps past 9 and still counts
WRAPPING_RUN = "7890"

LABEL_UPPERCASE = "an uppercase letter"
LABEL_LOWERCASE = "a lowercase letter"
LABEL_DIGIT = "a digit"
LABEL_SYMBOL = "a symbol"
LABEL_SEQUENTIAL = "no sequential digits"


def length_label(min_length: int) -> str:
    return f"at least {min_length} characters"


def has_sequential_digits(password: str, run_length: int = SEQUENTIAL_RUN_LENGTH) -> bool:
    """Detect ``run_length`` consecutive digits stepping by +1 or -1.

    Steps do not wrap, so "9012" and "1098" pass; "7890" is rejected as
    the keyboard run it is.

    Args:
        password: Candidate password.
        run_length: Length of the run to reject.

    Returns:
        True if such a run occurs anywhere in the password.
    """
    if run_length <= len(WRAPPING_RUN) and WRAPPING_RUN in password:
        return True
    ascending = descending = 1
    for prev, cur in zip(password, password[1:], strict=False):
        if prev in string.digits and cur in string.digits:
            step = int(cur) - int(prev)
            ascending = ascending + 1 if step == 1 else 1
            descending = descending + 1 if step == -1 else 1
        else:
            ascending = descending = 1
        if ascending >= run_length or descending >= run_length:
            return True
    return False


def check_password_rules(password: str, min_length: int = 12) -> list[str]:
    """Evaluate the composition rules.

    Args:
        password: Candidate password.
        min_length: Minimum number of characters.

    Returns:
        Labels of the failed rules, in a fixed order. Empty when all pass.
    """
    failures: list[str] = []
    if len(password) < min_length:
        failures.append(length_label(min_length))
    if not any(c in string.ascii_uppercase for c in password):
        failures.append(LABEL_UPPERCASE)
    if not any(c in string.ascii_lowercase for c in password):
        failures.append(LABEL_LOWERCASE)
    if not any(c in string.digits for c in password):
        failures.append(LABEL_DIGIT)
    if not any(c in SYMBOLS for c in password):
        failures.append(LABEL_SYMBOL)
    if has_sequential_digits(password):
        failures.append(LABEL_SEQUENTIAL)
    return failures
