# explosive/version.py
"""
explosive Version Information

Version number and package metadata. The package follows semantic versioning
(MAJOR.MINOR.PATCH).
"""

# Version components
VERSION_MAJOR = 1
VERSION_MINOR = 0
VERSION_PATCH = 0

# Full version string
__version__ = f"{VERSION_MAJOR}.{VERSION_MINOR}.{VERSION_PATCH}"

# Package metadata
__title__ = "explosive"
__description__ = "Recursive unit root tests for explosive behaviour and bubble dating"
__author__ = "explosive developers"
__license__ = "MIT"
