"""Format predicates for submitted field values.

Plain functions, no side effects. They answer "does this string look like X"
and leave messaging to the constraint validator.
"""

import re

from formpipe.domain.validation.constraints import PhoneMode

# Structural email grammar: 6-254 characters overall, a 1-64 character local
# part, and a domain ending in a TLD of at least two letters.
EMAIL_PATTERN = re.compile(
    r"^(?=[a-zA-Z0-9@._%+-]{6,254}$)[a-zA-Z0-9._%+-]{1,64}@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"
)

PHONE_PATTERNS = {
    PhoneMode.LOOSE: re.compile(r"^[\d\s()+-]{8,}$"),
    PhoneMode.STRICT: re.compile(r"^\d{8,15}$"),
    PhoneMode.E164: re.compile(r"^\+?[1-9]\d{7,14}$"),
}


def is_email(value: str) -> bool:
    """Check a value against the structural email grammar.

    Besides the pattern, rejects leading, trailing and consecutive dots in both
    the local part and the domain.
    """
    if not EMAIL_PATTERN.fullmatch(value):
        return False

    local, domain = value.split("@", 1)
    for part in (local, domain):
        if part.startswith(".") or part.endswith(".") or ".." in part:
            return False
    return True


def is_phone(value: str, mode: PhoneMode | str = PhoneMode.E164) -> bool:
    """Check a phone number against the grammar of the given mode.

    The value is trimmed first. Unknown modes fall back to E.164.

    >>> is_phone("+14155552671")
    True
    >>> is_phone("(415) 555-2671", "loose")
    True
    >>> is_phone("0000000")
    False
    """
    if not value:
        return False
    try:
        phone_mode = PhoneMode(mode)
    except ValueError:
        phone_mode = PhoneMode.E164
    # fullmatch: "$" would also accept a trailing newline
    return PHONE_PATTERNS[phone_mode].fullmatch(value.strip()) is not None

