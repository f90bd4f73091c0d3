"""
Version information for the H2J converter.

This module provides version tracking for the standalone converter.
"""

from datetime import datetime, timezone

# Semantic versioning: MAJOR.MINOR.PATCH
VERSION_MAJOR = 1
VERSION_MINOR = 0
VERSION_PATCH = 0

# Version string
VERSION = f"{VERSION_MAJOR}.{VERSION_MINOR}.{VERSION_PATCH}"

# Build identifier (date-based)
BUILD_DATE = "2026-10-17"

# Converter identifier
CONVERTER_ID = "h2j-hl7-json"


def get_version_info() -> dict:
    """
    Get complete version information, as reported by the health endpoint.

    Returns:
        Dictionary with version metadata
    """
    return {
        "converter": CONVERTER_ID,
        "version": VERSION,
        "buildDate": BUILD_DATE,
        "generatedAt": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
    }


def get_version_string() -> str:
    """
    Get formatted version string for display.

    Returns:
        Formatted version string
    """
    return f"{CONVERTER_ID} v{VERSION} ({BUILD_DATE})"
