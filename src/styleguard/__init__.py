"""styleguard - conformance engine for a CSS/SCSS and Python/Django style guide."""
from styleguard.constants import __version__

__all__ = ["__version__"]
