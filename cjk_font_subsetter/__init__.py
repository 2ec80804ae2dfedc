"""
CJK web font subset generator.

Rewrites a Google Fonts @font-face stylesheet to point at locally
generated WOFF/WOFF2 subsets of a source font.
"""

__version__ = "0.1.0"
