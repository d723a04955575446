"""Keep markdown code blocks in sync with annotated source file snippets."""

from .errors import GeoffreyError
from .markers import DOXYGEN, MarkerSyntax, extract
from .models import ElidedNamed, Named, PartialElided, Region, RegionForest, Tag, WholeFile
from .resolver import resolve
from .rewriter import RewriteResult, rewrite, splice
from .tags import iter_tags, parse_tags

__all__ = [
    "DOXYGEN",
    "ElidedNamed",
    "GeoffreyError",
    "MarkerSyntax",
    "Named",
    "PartialElided",
    "Region",
    "RegionForest",
    "RewriteResult",
    "Tag",
    "WholeFile",
    "extract",
    "iter_tags",
    "parse_tags",
    "resolve",
    "rewrite",
    "splice",
]
