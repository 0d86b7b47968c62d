from .rewriter import RewriteResult, TokenRewriter, build_pattern, rewrite
from .sourcemap import SourceMap
from .splice import SpliceBuffer
from .table import ReplacementTable

__all__ = [
    "ReplacementTable",
    "RewriteResult",
    "SourceMap",
    "SpliceBuffer",
    "TokenRewriter",
    "build_pattern",
    "rewrite",
]
