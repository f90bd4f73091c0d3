"""
Name helpers shared by the engines.
"""

import re

_DROPPED_CHARACTERS = re.compile(r"[.'()]")
_SEPARATOR_RUNS = re.compile(r"[^a-z0-9]+")


def normalize(name: str) -> str:
    """
    Turn a profile field name into a JSON property name.

    "Receiving Facility" -> "receiving_facility",
    "Set ID - OBX" -> "set_id_obx", "Name & Address" -> "name_and_address".
    """
    value = name.strip().lower().replace("&", "and")
    value = _DROPPED_CHARACTERS.sub("", value)
    value = _SEPARATOR_RUNS.sub("_", value)
    return value.strip("_")
