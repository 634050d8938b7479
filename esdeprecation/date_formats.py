"""
Date formats whose meaning changed when Elasticsearch 7.0 moved from joda-time to java.time.

A custom pattern is deprecated if it uses one of the letters below. Built-in named formats
(e.g. strict_date_optional_time) and patterns prefixed with 8 (already java.time) are not.
"""

USE_NEW_FORMAT_SPECIFIERS = "Use new java.time date format specifiers."

# Suggestions are reported in this order
JODA_PATTERN_DEPRECATIONS = {
    "Y": "'Y' year-of-era should be replaced with 'y'. Use 'Y' for week-based-year.",
    "y": "'y' year should be replaced with 'u'. Use 'y' for year-of-era.",
    "C": "'C' century of era is no longer supported.",
    "x": "'x' weak-year should be replaced with 'Y'. Use 'x' for zone-offset.",
    "Z": "'Z' time zone offset/id fails when parsing 'Z' for Zulu timezone. Consider using 'X'.",
    "z": "'z' time zone text. Will print 'Z' for Zulu given UTC timezone.",
}

_NAMED_FORMAT_BASES = [
    "basic_date",
    "basic_date_time",
    "basic_date_time_no_millis",
    "basic_ordinal_date",
    "basic_ordinal_date_time",
    "basic_ordinal_date_time_no_millis",
    "basic_time",
    "basic_time_no_millis",
    "basic_t_time",
    "basic_t_time_no_millis",
    "basic_week_date",
    "basic_week_date_time",
    "basic_week_date_time_no_millis",
    "date",
    "date_hour",
    "date_hour_minute",
    "date_hour_minute_second",
    "date_hour_minute_second_fraction",
    "date_hour_minute_second_millis",
    "date_optional_time",
    "date_time",
    "date_time_no_millis",
    "hour",
    "hour_minute",
    "hour_minute_second",
    "hour_minute_second_fraction",
    "hour_minute_second_millis",
    "ordinal_date",
    "ordinal_date_time",
    "ordinal_date_time_no_millis",
    "time",
    "time_no_millis",
    "t_time",
    "t_time_no_millis",
    "week_date",
    "week_date_time",
    "week_date_time_no_millis",
    "weekyear",
    "weekyear_week",
    "weekyear_week_day",
    "year",
    "year_month",
    "year_month_day",
    "epoch_millis",
    "epoch_second",
]


def _camel_case(name: str) -> str:
    first, *rest = name.split("_")
    return first + "".join(part.title() for part in rest)


# Named formats can be given in snake case, camel case (deprecated, but still accepted) and with a strict_ prefix
NAMED_FORMATS = frozenset(
    variant
    for name in _NAMED_FORMAT_BASES
    for variant in (name, _camel_case(name), f"strict_{name}", _camel_case(f"strict_{name}"))
)


def split_combined_patterns(fmt: str) -> list[str]:
    """Split a format such as 'yyyy-MM-dd||epoch_millis' into its alternatives"""
    return [pattern.strip() for pattern in fmt.split("||") if pattern.strip()]


def _is_joda_pattern(pattern: str) -> bool:
    return not pattern.startswith("8") and pattern not in NAMED_FORMATS


def _deprecated_letters(pattern: str) -> list[str]:
    return [letter for letter in JODA_PATTERN_DEPRECATIONS if letter in pattern]


def is_deprecated_pattern(fmt: str) -> bool:
    """Does any alternative of this format use a joda pattern letter that changed meaning in 7.0?"""
    return any(_is_joda_pattern(p) and _deprecated_letters(p) for p in split_combined_patterns(fmt))


def format_suggestion(fmt: str) -> str:
    """Advice for every deprecated letter used in this format, without duplicates"""
    warnings: dict[str, None] = {}
    for pattern in split_combined_patterns(fmt):
        if _is_joda_pattern(pattern):
            for letter in _deprecated_letters(pattern):
                warnings[JODA_PATTERN_DEPRECATIONS[letter]] = None
    return "; ".join(warnings)
