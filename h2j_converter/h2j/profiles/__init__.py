"""
Profile (schema) module for H2J.

Field descriptor models, typed cardinality parsing and resource loading.
"""

from .models import Cardinality, CardinalityKind, FieldDescriptor, Profile, SegmentConfig
from .resource_manager import ResourceManager, DEFAULT_RESOURCES_DIR

__all__ = [
    "Cardinality",
    "CardinalityKind",
    "FieldDescriptor",
    "Profile",
    "SegmentConfig",
    "ResourceManager",
    "DEFAULT_RESOURCES_DIR",
]
