"""
itpl - include-aware Go template preprocessor

itpl parses Go text/template files without executing them, replaces every
``{{include "path"}}`` action with the content of the referenced file and
returns one combined template that any unmodified template engine can parse.
"""

from itpl.core.composition.loader import Loader, LoadResult, load

__version__ = "1.0.0"
__all__ = ["__version__", "Loader", "LoadResult", "load"]
