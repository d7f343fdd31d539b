"""Common literal values used across siteforge.

These constants keep filenames, limits, and defaults centralized so the
pipeline stages, CLI, and tests import the same values without drifting.

Examples
--------
>>> from siteforge import _constants
>>> _constants.MAX_REDIRECTS
5
>>> _constants.DEFAULT_CONFIG_NAMES[0]
'config.yaml'
"""

DEFAULT_CONFIG_NAMES = ("config.yaml", "config.yml")
YAML_SUFFIXES = frozenset({".yaml", ".yml"})

DEFAULT_ASSETS_DIRNAME = "assets"
MAX_REDIRECTS = 5
DOWNLOAD_TIMEOUT = 30.0
DOWNLOAD_CHUNK_SIZE = 64 * 1024
USER_AGENT = "siteforge/0.1"

IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".gif", ".webp", ".avif", ".svg"})
LARGE_ASSET_BYTES = 5 * 1024 * 1024

ANALYSIS_FILENAME = "image-analysis.json"
ALT_TEXT_LIMIT = 125
