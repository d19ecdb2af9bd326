"""Tests for dataset loaders and the catalogue."""

from collections.abc import Callable
from pathlib import Path

import numpy as np
import pandas as pd
import pandera.errors
import pytest

from predictlab.config import ExperimentConfig
from predictlab.datasets.base import DatasetKind, as_response, read_r_csv
from predictlab.datasets.catalog import (
    DATASET_CATALOG,
    get_dataset_spec,
    list_datasets,
    load_dataset,
)
from predictlab.datasets.loaders import TecatorLoader


class TestReadRCsv:
    """Tests for reading CSV files written by R."""

    def test_drops_row_names(self, tmp_path: Path) -> None:
        """Test the unnamed leading row-name column is dropped."""
        path = tmp_path / "table.csv"
        path.write_text('"","a","b"\n"1",1,2\n"2",3,4\n')
        df = read_r_csv(path)
        assert list(df.columns) == ["a", "b"]
        assert len(df) == 2

    def test_keeps_named_first_column(self, tmp_path: Path) -> None:
        """Test files without row names are read unchanged."""
        path = tmp_path / "table.csv"
        path.write_text("a,b\n1,2\n")
        assert list(read_r_csv(path).columns) == ["a", "b"]

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError, match="Dataset file not found"):
            read_r_csv(tmp_path / "missing.csv")

    def test_as_response(self) -> None:
        """Test a single-column response is renamed."""
        df = as_response(pd.DataFrame({"x": [1.0, 2.0]}), "fat")
        assert list(df.columns) == ["fat"]

    def test_as_response_rejects_wide_table(self) -> None:
        """Test a multi-column table is not a response."""
        with pytest.raises(ValueError, match="single response column"):
            as_response(pd.DataFrame({"x": [1.0], "y": [2.0]}), "fat")


class TestCatalog:
    """Tests for the dataset catalogue."""

    def test_catalog_names(self) -> None:
        """Test all benchmark datasets are registered."""
        assert set(list_datasets()) == {
            "solubility",
            "glass",
            "soybean",
            "tecator",
            "chemical_manufacturing",
            "permeability",
            "friedman1",
        }

    def test_kinds(self) -> None:
        """Test glass and soybean carry categorical responses."""
        kinds = {name: spec.kind for name, spec in DATASET_CATALOG.items()}
        assert kinds["glass"] == DatasetKind.CLASSIFICATION
        assert kinds["soybean"] == DatasetKind.CLASSIFICATION
        assert kinds["solubility"] == DatasetKind.REGRESSION

    def test_unknown_dataset(self) -> None:
        """Test unknown names raise KeyError."""
        with pytest.raises(KeyError, match="Unknown dataset"):
            get_dataset_spec("iris")

    def test_generated_dataset_has_no_files(self) -> None:
        """Test the simulated dataset reads no files."""
        assert get_dataset_spec("friedman1").files == []


class TestSolubilityLoader:
    """Tests for the solubility loader."""

    def test_predefined_split(
        self, solubility_dir: Path, make_config: Callable[..., ExperimentConfig]
    ) -> None:
        """Test the train and test files become a predefined split."""
        config = make_config(dataset={"name": "solubility", "root": str(solubility_dir)})
        dataset = load_dataset(config)

        assert dataset.has_predefined_split
        assert dataset.X.shape == (30, 9)
        assert dataset.X_test is not None and len(dataset.X_test) == 10
        assert dataset.y.name == "solubility"
        assert dataset.n_samples == 40

    def test_combined(
        self, solubility_dir: Path, make_config: Callable[..., ExperimentConfig]
    ) -> None:
        """Test combined() stacks the predefined partitions."""
        config = make_config(dataset={"name": "solubility", "root": str(solubility_dir)})
        X, y = load_dataset(config).combined()
        assert len(X) == len(y) == 40

    def test_missing_file(
        self, tmp_path: Path, make_config: Callable[..., ExperimentConfig]
    ) -> None:
        """Test a missing file raises FileNotFoundError."""
        config = make_config(dataset={"name": "solubility", "root": str(tmp_path)})
        with pytest.raises(FileNotFoundError):
            load_dataset(config)


class TestChemicalManufacturingLoader:
    """Tests for the chemical manufacturing loader."""

    def test_load(
        self, chemical_dir: Path, make_config: Callable[..., ExperimentConfig]
    ) -> None:
        """Test the yield column is split off and missing values survive."""
        config = make_config(
            dataset={"name": "chemical_manufacturing", "root": str(chemical_dir)}
        )
        dataset = load_dataset(config)

        assert dataset.y.name == "Yield"
        assert "Yield" not in dataset.X.columns
        assert dataset.X.shape == (40, 4)
        assert int(dataset.X.isna().sum().sum()) == 2
        assert not dataset.has_predefined_split

    def test_schema_violation(
        self, chemical_dir: Path, make_config: Callable[..., ExperimentConfig]
    ) -> None:
        """Test a yield outside (0, 100] fails validation."""
        path = chemical_dir / "ChemicalManufacturingProcess.csv"
        df = pd.read_csv(path, index_col=0)
        df.loc[1, "Yield"] = 150.0
        df.to_csv(path)

        config = make_config(
            dataset={"name": "chemical_manufacturing", "root": str(chemical_dir)}
        )
        with pytest.raises(pandera.errors.SchemaError):
            load_dataset(config)

    def test_unknown_target(
        self, chemical_dir: Path, make_config: Callable[..., ExperimentConfig]
    ) -> None:
        """Test a configured target that is not a column raises ValueError."""
        config = make_config(
            dataset={
                "name": "chemical_manufacturing",
                "root": str(chemical_dir),
                "target": "Purity",
            }
        )
        with pytest.raises(ValueError, match="Target column 'Purity'"):
            load_dataset(config)


class TestTecatorLoader:
    """Tests for the tecator loader."""

    @pytest.fixture
    def tecator_dir(self, tmp_path: Path) -> Path:
        """Tecator files with R's V1..V100 and V1..V3 headers."""
        rng = np.random.default_rng(4)
        data_dir = tmp_path / "data"
        data_dir.mkdir()
        absorp = pd.DataFrame(
            rng.uniform(2.0, 4.0, size=(12, 100)),
            columns=[f"V{i}" for i in range(1, 101)],
        )
        absorp.to_csv(data_dir / "absorp.csv")
        endpoints = pd.DataFrame(
            {
                "V1": rng.uniform(40, 70, 12),
                "V2": rng.uniform(1, 40, 12),
                "V3": rng.uniform(12, 20, 12),
            }
        )
        endpoints.to_csv(data_dir / "endpoints.csv")
        return data_dir

    def test_load_fat(
        self, tecator_dir: Path, make_config: Callable[..., ExperimentConfig]
    ) -> None:
        """Test channels are renamed and fat is the default response."""
        config = make_config(dataset={"name": "tecator", "root": str(tecator_dir)})
        dataset = load_dataset(config)

        assert dataset.X.shape == (12, 100)
        assert dataset.X.columns[0] == "absorp_001"
        assert dataset.y.name == "fat"

    def test_other_endpoint(
        self, tecator_dir: Path, make_config: Callable[..., ExperimentConfig]
    ) -> None:
        """Test protein can be chosen as the response."""
        config = make_config(
            dataset={"name": "tecator", "root": str(tecator_dir), "target": "protein"}
        )
        assert load_dataset(config).y.name == "protein"

    def test_invalid_endpoint(
        self, tecator_dir: Path, make_config: Callable[..., ExperimentConfig]
    ) -> None:
        """Test a response outside the three endpoints raises."""
        config = make_config(
            dataset={"name": "tecator", "root": str(tecator_dir), "target": "salt"}
        )
        with pytest.raises(ValueError, match="Tecator target"):
            load_dataset(config)

    def test_wrong_channel_count(
        self, tecator_dir: Path, make_config: Callable[..., ExperimentConfig]
    ) -> None:
        """Test a spectrum file with the wrong width raises."""
        path = tecator_dir / "absorp.csv"
        pd.read_csv(path, index_col=0).iloc[:, :50].to_csv(path)

        config = make_config(dataset={"name": "tecator", "root": str(tecator_dir)})
        with pytest.raises(ValueError, match="Expected 100 absorbance columns"):
            TecatorLoader(config).load()


class TestGlassLoader:
    """Tests for the glass loader."""

    def test_categorical_response(
        self, glass_dir: Path, make_config: Callable[..., ExperimentConfig]
    ) -> None:
        """Test glass types are returned as string labels."""
        config = make_config(dataset={"name": "glass", "root": str(glass_dir)})
        dataset = load_dataset(config)

        assert dataset.kind == DatasetKind.CLASSIFICATION
        assert set(dataset.y.unique()) == {"1", "2", "7"}
        assert dataset.X.shape[1] == 9


class TestFriedman1Loader:
    """Tests for the simulated Friedman #1 data."""

    def test_generated_split(self, make_config: Callable[..., ExperimentConfig]) -> None:
        """Test train and test sizes follow the options."""
        config = make_config(
            dataset={"name": "friedman1", "options": {"n_train": 50, "n_test": 30}}
        )
        dataset = load_dataset(config)

        assert dataset.X.shape == (50, 10)
        assert dataset.X_test is not None and dataset.X_test.shape == (30, 10)
        assert list(dataset.X.columns[:2]) == ["X1", "X2"]

    def test_deterministic(self, make_config: Callable[..., ExperimentConfig]) -> None:
        """Test the same seed gives the same data."""
        config = make_config(
            dataset={"name": "friedman1", "options": {"n_train": 20, "n_test": 10}}
        )
        first = load_dataset(config)
        second = load_dataset(config)
        pd.testing.assert_frame_equal(first.X, second.X)
        pd.testing.assert_series_equal(first.y, second.y)

    def test_training_set_independent_of_test_size(
        self, make_config: Callable[..., ExperimentConfig]
    ) -> None:
        """Test changing n_test leaves the training rows unchanged."""
        small = make_config(
            dataset={"name": "friedman1", "options": {"n_train": 20, "n_test": 10}}
        )
        large = make_config(
            dataset={"name": "friedman1", "options": {"n_train": 20, "n_test": 100}}
        )
        pd.testing.assert_frame_equal(load_dataset(small).X, load_dataset(large).X)
