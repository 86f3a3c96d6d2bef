"""Region code extraction from compound NYT geo identifiers."""

from __future__ import annotations


def geoid_to_region_code(geoid: object) -> str | None:
    """Return the second hyphen-delimited segment of ``geoid``.

    NYT identifiers look like ``USA-04013``; the trailing segment is the county
    FIPS code. Missing values and values without a hyphen yield None.
    """
    if geoid is None:
        return None
    parts = str(geoid).split("-")
    if len(parts) < 2:
        return None
    return parts[1]
