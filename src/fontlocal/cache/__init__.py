"""Cache management for fontlocal.

Generated stylesheets are cached per source address, see
:mod:`fontlocal.cache.stylesheet`.
"""

from .stylesheet import StylesheetCache, fingerprint

__all__ = [
    "StylesheetCache",
    "fingerprint",
]
