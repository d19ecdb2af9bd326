"""
Dataset catalogue.

Maps catalogue names to loader classes and human-readable descriptions.
"""

from dataclasses import dataclass

from predictlab.config.settings import ExperimentConfig
from predictlab.datasets.base import DataLoader, Dataset, DatasetKind
from predictlab.datasets.loaders import (
    ChemicalManufacturingLoader,
    Friedman1Loader,
    GlassLoader,
    PermeabilityLoader,
    SolubilityLoader,
    SoybeanLoader,
    TecatorLoader,
)
from predictlab.utils.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class DatasetSpec:
    """Catalogue entry for a benchmark dataset."""

    name: str
    loader: type[DataLoader]
    description: str

    @property
    def kind(self) -> DatasetKind:
        """Response type of the dataset."""
        return self.loader.kind

    @property
    def default_target(self) -> str:
        """Response column used when the config does not name one."""
        return self.loader.default_target

    @property
    def files(self) -> list[str]:
        """Default file names read by the loader."""
        return list(self.loader.default_files.values())


DATASET_CATALOG: dict[str, DatasetSpec] = {
    spec.name: spec
    for spec in (
        DatasetSpec(
            "solubility",
            SolubilityLoader,
            "Aqueous solubility from fingerprints and descriptors",
        ),
        DatasetSpec("glass", GlassLoader, "Glass identification by oxide content"),
        DatasetSpec("soybean", SoybeanLoader, "Soybean disease categorical indicators"),
        DatasetSpec("tecator", TecatorLoader, "Meat fat content from IR spectra"),
        DatasetSpec(
            "chemical_manufacturing",
            ChemicalManufacturingLoader,
            "Product yield from biological and process measurements",
        ),
        DatasetSpec(
            "permeability",
            PermeabilityLoader,
            "Compound permeability from binary fingerprints",
        ),
        DatasetSpec("friedman1", Friedman1Loader, "Simulated Friedman #1 benchmark"),
    )
}


def list_datasets() -> list[str]:
    """List all catalogue names."""
    return list(DATASET_CATALOG.keys())


def get_dataset_spec(name: str) -> DatasetSpec:
    """
    Get a catalogue entry by name.

    Raises:
        KeyError: If the dataset is not in the catalogue.
    """
    if name not in DATASET_CATALOG:
        available = ", ".join(DATASET_CATALOG.keys())
        msg = f"Unknown dataset '{name}'. Available: {available}"
        raise KeyError(msg)
    return DATASET_CATALOG[name]


def load_dataset(config: ExperimentConfig, *, validate: bool = True) -> Dataset:
    """
    Load the dataset named in the configuration.

    Args:
        config: Experiment configuration.
        validate: Whether to validate tables against their schemas.

    Returns:
        Loaded Dataset.
    """
    spec = get_dataset_spec(config.dataset.name)
    loader = spec.loader(config)
    return loader.load(validate=validate)
