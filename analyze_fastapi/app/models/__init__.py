"""Initialize the models package."""

from .analyze_spec import AnalyzeSpec, ResolvedAnalyzeSpec
from .output_options import OutputOptions
from .token_record import TokenRecord

__all__ = [
    "AnalyzeSpec",
    "OutputOptions",
    "ResolvedAnalyzeSpec",
    "TokenRecord",
]
