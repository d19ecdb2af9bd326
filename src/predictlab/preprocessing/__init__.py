"""
Predictor filtering and preprocessing pipeline construction.
"""

from predictlab.preprocessing.filters import (
    CorrelationFilter,
    NearZeroVarianceFilter,
    nzv_table,
)
from predictlab.preprocessing.pipeline import (
    ModelPreprocess,
    build_preprocessor,
    split_feature_types,
)

__all__ = [
    "CorrelationFilter",
    "ModelPreprocess",
    "NearZeroVarianceFilter",
    "build_preprocessor",
    "nzv_table",
    "split_feature_types",
]
