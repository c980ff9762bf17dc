"""Localization file manager — keeps per-language JSON files in sync."""

import re

__version__ = "1.0.0"

DEFAULT_BASE_LANGUAGE = "en"

# Interpolation variables like {name} or {count}
PLACEHOLDER_RE = re.compile(r'\{([^}]+)\}')
