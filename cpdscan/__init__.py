"""
CPDScan — token-based copy/paste detector with CSV, XML, text
and Visual Studio reports.

Copyright (c) 2026 Den Rozhnovskiy
Licensed under the MIT License.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("cpdscan")
except PackageNotFoundError:
    __version__ = "dev"

__all__ = ["__version__"]
