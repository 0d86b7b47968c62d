from bundlewire.externals.classifier import ExternalsClassifier
from bundlewire.models import Classification, InlineRule, PackageManifest
from bundlewire.replace.rewriter import RewriteResult, TokenRewriter, rewrite
from bundlewire.replace.table import ReplacementTable

__all__ = [
    "Classification",
    "ExternalsClassifier",
    "InlineRule",
    "PackageManifest",
    "ReplacementTable",
    "RewriteResult",
    "TokenRewriter",
    "rewrite",
]
