# tests/__init__.py
"""
Expose common test utilities so tests can import directly:
    from tests import make_note, make_config
"""

from .utils import make_config, make_note

__all__ = ["make_note", "make_config"]
