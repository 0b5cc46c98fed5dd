"""
Utils package for Tech Failures Search
"""

from .utils import get_logger, load_json, save_json, timer

__all__ = ['get_logger', 'load_json', 'save_json', 'timer']
