"""Translation of vendor regex strings into compiled patterns.

The reference dataset stores PCRE-style delimited patterns such as
``/mozilla\\/5\\.0 .*firefox\\/([0-9a-z\\+\\-\\.]+).*/si``. They are compiled
with the ``regex`` package, which accepts the PCRE constructs (atomic groups,
possessive quantifiers, variable-length lookbehind) the standard library
rejects, and which supports a per-search time budget.
"""

from functools import lru_cache

import regex

from uaintel.common.exceptions import PatternCompileError
from uaintel.common.logging import get_logger
from uaintel.common.metrics import REGEX_TIMEOUTS

logger = get_logger(__name__)

DELIMITER = "/"

# Patterns are already Unicode, so "u" only needs to be accepted
FLAG_MAP: dict[str, int] = {
    "i": regex.IGNORECASE,
    "s": regex.DOTALL,
    "m": regex.MULTILINE,
    "x": regex.VERBOSE,
    "u": 0,
}


def split_pattern(source: str) -> tuple[str, str]:
    """Split ``/pattern/flags`` into its body and flag letters.

    Raises:
        PatternCompileError: If the delimiters are missing.
    """
    if not isinstance(source, str):
        raise PatternCompileError(
            "Pattern must be a string",
            details={"pattern": repr(source)},
        )

    end = source.rfind(DELIMITER)
    if not source.startswith(DELIMITER) or end <= 0:
        raise PatternCompileError(
            "Pattern is not in /pattern/flags form",
            details={"pattern": source},
        )

    return source[1:end], source[end + 1:]


@lru_cache(maxsize=None)
def translate(source: str) -> regex.Pattern:
    """Compile a delimited vendor pattern, once per distinct source.

    Args:
        source: Pattern in ``/pattern/flags`` form.

    Returns:
        Compiled pattern. Capture groups are kept as written.

    Raises:
        PatternCompileError: On bad delimiters, unknown flags or syntax errors.
    """
    body, flag_letters = split_pattern(source)

    flags = regex.VERSION0
    for letter in flag_letters:
        if letter not in FLAG_MAP:
            raise PatternCompileError(
                f"Unsupported pattern flag {letter!r}",
                details={"pattern": source},
            )
        flags |= FLAG_MAP[letter]

    try:
        return regex.compile(body, flags)
    except regex.error as e:
        raise PatternCompileError(
            f"Pattern does not compile: {e}",
            details={"pattern": source},
            cause=e,
        ) from e


def search(
    pattern: regex.Pattern,
    text: str,
    timeout: float | None = None,
    table: str = "",
) -> regex.Match | None:
    """Search ``text`` with a time budget.

    A search that runs out of time counts as no match for that row.
    """
    try:
        return pattern.search(text, timeout=timeout)
    except TimeoutError:
        REGEX_TIMEOUTS.labels(table=table or "unknown").inc()
        logger.warning(
            "Pattern search timed out",
            table=table,
            pattern=pattern.pattern,
            timeout=timeout,
        )
        return None


def first_group(match: regex.Match | None) -> str:
    """Return capture group 1, or an empty string if absent."""
    if match is None or match.re.groups < 1:
        return ""
    return match.group(1) or ""
