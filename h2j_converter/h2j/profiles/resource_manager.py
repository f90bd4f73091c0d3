"""
Resource manager for H2J.

This module handles loading and caching of profile and template documents.
Documents are looked up on the filesystem first and then in the package's
``resources`` directory, so callers can name a bundled profile
("PhinGuideProfile.json") or point at their own file.
"""

import copy
import json
from pathlib import Path
from typing import Any, Dict, Optional

from .models import Profile
from ..utils.exceptions import ConfigurationError, TemplateError

DEFAULT_RESOURCES_DIR = Path(__file__).resolve().parent.parent / "resources"


class ResourceManager:
    """
    Loads profile and template documents by name and caches them.

    Cached documents are never handed out for mutation: profiles are frozen
    and templates are returned as deep copies, so one manager can serve many
    transformers at once.
    """

    def __init__(self, resources_dir: Optional[str] = None, allow_filesystem: bool = True,
                 verbose: bool = False):
        """
        Args:
            resources_dir: Directory holding named resources (defaults to the bundled ones)
            allow_filesystem: Accept names that point at arbitrary files
            verbose: Print loading progress
        """
        self.resources_dir = Path(resources_dir) if resources_dir else DEFAULT_RESOURCES_DIR
        self.allow_filesystem = allow_filesystem
        self.verbose = verbose
        self._document_cache: Dict[Path, Any] = {}
        self._profile_cache: Dict[Path, Profile] = {}

    def resolve_path(self, name: str) -> Path:
        """
        Map a resource name to a file path.

        A leading "/" is ignored for bundled resources, matching how
        classpath-style names are written.
        """
        if self.allow_filesystem:
            candidate = Path(name)
            if candidate.is_file():
                return candidate
        return self.resources_dir / name.lstrip("/")

    def load_json(self, name: str) -> Any:
        """
        Load and cache a JSON document.

        Raises:
            ConfigurationError: If the resource is missing or is not valid JSON
        """
        path = self.resolve_path(name)
        if path in self._document_cache:
            return self._document_cache[path]

        if not path.is_file():
            raise ConfigurationError(f"Resource not found: {name}")

        try:
            with open(path, 'r', encoding='utf-8') as f:
                document = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in resource {name}: {e}")
        except (IOError, OSError) as e:
            raise ConfigurationError(f"Cannot read resource {name}: {e}")

        if self.verbose:
            print(f"   ✅ Loaded {path.name}")
        self._document_cache[path] = document
        return document

    def load_profile(self, name: str) -> Profile:
        """
        Load a profile document.

        Raises:
            ConfigurationError: If the profile is missing, invalid JSON or malformed
        """
        path = self.resolve_path(name)
        if path not in self._profile_cache:
            self._profile_cache[path] = Profile.from_dict(self.load_json(name))
        return self._profile_cache[path]

    def load_template(self, name: str) -> Dict[str, Any]:
        """
        Load a template document.

        Returns:
            A private copy of the template

        Raises:
            TemplateError: If the template is missing, invalid JSON or not an object
        """
        try:
            document = self.load_json(name)
        except ConfigurationError as e:
            raise TemplateError(f"Cannot load template: {e}")
        if not isinstance(document, dict):
            raise TemplateError(f"Template {name} must be a JSON object")
        return copy.deepcopy(document)

    def is_available(self, name: str) -> bool:
        return self.resolve_path(name).is_file()

    def clear_cache(self) -> None:
        """Clear caches to force reload on next access."""
        self._document_cache.clear()
        self._profile_cache.clear()
