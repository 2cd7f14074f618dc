"""Include composition for Go templates.

Pipeline for one file:
1. SYNTAX      - parse with placeholder functions (SyntaxAdapter)
2. WALK        - find {{include "path"}} at any nesting depth (walk)
3. RESOLVE     - recursively load the target, detecting cycles (IncludeResolver)
4. SERIALIZE   - print the mutated trees back to template text (serialize)
"""

from .context import ResolutionContext
from .loader import Loader, LoadResult, load
from .resolver import IncludeResolver
from .serializer import serialize, serialize_tree
from .syntax import DEFAULT_MAX_FUNCTION_RETRIES, ParseResult, SyntaxAdapter
from .walker import RawNode, include_target, walk

__all__ = [
    "DEFAULT_MAX_FUNCTION_RETRIES",
    "IncludeResolver",
    "Loader",
    "LoadResult",
    "ParseResult",
    "RawNode",
    "ResolutionContext",
    "SyntaxAdapter",
    "include_target",
    "load",
    "serialize",
    "serialize_tree",
    "walk",
]
