import re
import urllib.parse
from typing import Any, List, Optional, Tuple

from .logging import get_logger


class ValidationError(Exception):
    """Custom validation error."""
    pass


class BaseValidator:
    """Base validator class."""

    def __init__(self):
        self.logger = get_logger(__name__)

    def validate(self, value: Any) -> Tuple[bool, Optional[str]]:
        """
        Validate a value.

        Returns:
            Tuple of (is_valid, error_message)
        """
        raise NotImplementedError

    def is_valid(self, value: Any) -> bool:
        """Check if value is valid."""
        valid, _ = self.validate(value)
        return valid


class URLValidator(BaseValidator):
    """Validate URLs."""

    def __init__(self, allowed_schemes: List[str] = None):
        super().__init__()
        self.allowed_schemes = allowed_schemes or ['http', 'https']

    def validate(self, value: Any) -> Tuple[bool, Optional[str]]:
        """Validate URL."""
        if not isinstance(value, str):
            return False, "URL must be a string"

        if not value.strip():
            return False, "URL cannot be empty"

        try:
            parsed = urllib.parse.urlparse(value)
        except ValueError as e:
            return False, f"Invalid URL format: {e}"

        if not parsed.scheme:
            return False, "URL must include a scheme (http/https)"

        if parsed.scheme not in self.allowed_schemes:
            return False, f"URL scheme must be one of: {', '.join(self.allowed_schemes)}"

        if not parsed.netloc:
            return False, "URL must include a domain"

        return True, None


class VersionValidator(BaseValidator):
    """Validate dotted numeric version strings such as 1.2.3 or 1.2.3.4."""

    def __init__(self):
        super().__init__()
        self.pattern = re.compile(r'^\d+(?:\.\d+)*$')

    def validate(self, value: Any) -> Tuple[bool, Optional[str]]:
        """Validate version string."""
        if not isinstance(value, str):
            return False, "Version must be a string"

        if not value.strip():
            return False, "Version cannot be empty"

        if not self.pattern.match(value.strip().lstrip('vV')):
            return False, "Version must be dotted numbers, e.g. 1.0.0 or 1.0.0.0"

        return True, None

    def compare_versions(self, version1: str, version2: str) -> int:
        """
        Compare two version strings.

        Missing trailing components count as zero, so "1.0" equals "1.0.0.0".

        Returns:
            -1 if version1 < version2
             0 if version1 == version2
             1 if version1 > version2

        Raises:
            ValidationError: if either version is not dotted numbers.
        """

        def parse_version(version: str) -> Tuple[int, ...]:
            valid, error = self.validate(version)
            if not valid:
                raise ValidationError(f"Invalid version '{version}': {error}")
            return tuple(int(part) for part in version.strip().lstrip('vV').split('.'))

        v1 = parse_version(version1)
        v2 = parse_version(version2)

        width = max(len(v1), len(v2))
        v1 = v1 + (0,) * (width - len(v1))
        v2 = v2 + (0,) * (width - len(v2))

        if v1 < v2:
            return -1
        elif v1 > v2:
            return 1
        else:
            return 0
