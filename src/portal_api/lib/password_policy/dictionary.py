"""Dictionary and common-word detection using zxcvbn."""

from zxcvbn import zxcvbn

# zxcvbn refuses longer inputs; the prefix still carries any leading word.
ZXCVBN_MAX_LENGTH = 72

LABEL_DICTIONARY = "no dictionary or common words"


def find_dictionary_words(password: str) -> list[str]:
    """Return the segments zxcvbn matched against one of its dictionaries.

    Args:
        password: Candidate password.

    Returns:
        Matched tokens (possibly l33t or reversed forms), in match order.
    """
    if not password:
        return []
    result = zxcvbn(password[:ZXCVBN_MAX_LENGTH])
    return [match["token"] for match in result.get("sequence", []) if match.get("dictionary_name")]
