"""
Knowledge Quiz Assistant Application Package.
Quiz flows whose answers are scored and explained by a language model.
"""

__version__ = "1.0.0"
__app_name__ = "Knowledge Quiz Assistant"

# Package metadata
__all__ = ["__version__", "__app_name__"]
