"""HTML minification and sanitization for translatable markup.

Python 3.13+.
"""

from .minifier import minify
from .sanitizer import parse_fragment, sanitize_html

__all__ = ["minify", "parse_fragment", "sanitize_html"]
