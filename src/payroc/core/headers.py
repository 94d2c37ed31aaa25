"""Case-insensitive header merging."""

from collections.abc import Mapping


def merge_headers(*header_sets: Mapping[str, str | None] | None) -> dict[str, str]:
    """
    Merge header mappings, later sets taking precedence.

    Header names are compared case-insensitively and emitted in lower case.
    A ``None`` value removes any header of that name set earlier.
    """
    result: dict[str, str] = {}
    for headers in header_sets:
        if not headers:
            continue
        for key, value in headers.items():
            name = key.lower()
            if value is None:
                result.pop(name, None)
            else:
                result[name] = value
    return result


def merge_only_defined_headers(
    *header_sets: Mapping[str, str | None] | None,
) -> dict[str, str]:
    """Like ``merge_headers`` but ``None`` values are skipped, never removing."""
    result: dict[str, str] = {}
    for headers in header_sets:
        if not headers:
            continue
        for key, value in headers.items():
            if value is not None:
                result[key.lower()] = value
    return result
