"""
Benchmark dataset loading with schema validation at the boundary.
"""

from predictlab.datasets.base import Dataset, DatasetKind, DataLoader, read_r_csv
from predictlab.datasets.catalog import (
    DATASET_CATALOG,
    DatasetSpec,
    get_dataset_spec,
    list_datasets,
    load_dataset,
)

__all__ = [
    "DATASET_CATALOG",
    "DataLoader",
    "Dataset",
    "DatasetKind",
    "DatasetSpec",
    "get_dataset_spec",
    "list_datasets",
    "load_dataset",
    "read_r_csv",
]
