"""
Schema registry for versioning and discovery.

Provides centralized access to all schema definitions with version tracking.
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, ClassVar

import pandera.pandas as pa

from predictlab.schemas.categorical import GlassSchema, SoybeanSchema
from predictlab.schemas.chemistry import (
    PermeabilityFingerprintSchema,
    PermeabilityResponseSchema,
    SolubilityPredictorSchema,
    SolubilityResponseSchema,
)
from predictlab.schemas.output import PredictionOutputSchema, PredictionTableSchema
from predictlab.schemas.process import ChemicalManufacturingSchema
from predictlab.schemas.simulated import Friedman1Schema
from predictlab.schemas.spectra import AbsorbanceSchema, EndpointSchema

if TYPE_CHECKING:
    import pandas as pd


class DataRole(Enum):
    """Classification of tables by their role in a modeling exercise."""

    PREDICTORS = "predictors"  # Feature matrix only
    RESPONSE = "response"  # Response vector only
    COMBINED = "combined"  # Predictors and response in one table
    OUTPUT = "output"  # Model outputs


@dataclass(frozen=True)
class SchemaInfo:
    """Metadata about a registered schema."""

    name: str
    schema: type[pa.DataFrameModel]
    version: str
    role: DataRole
    description: str


class SchemaRegistry:
    """
    Centralized registry for all data schemas.

    Provides version tracking and schema discovery.
    """

    _version = "1.0.0"

    _schemas: ClassVar[dict[str, SchemaInfo]] = {
        "solubility_predictors": SchemaInfo(
            name="solubility_predictors",
            schema=SolubilityPredictorSchema,
            version="1.0.0",
            role=DataRole.PREDICTORS,
            description="Fingerprints and descriptors for aqueous solubility",
        ),
        "solubility_response": SchemaInfo(
            name="solubility_response",
            schema=SolubilityResponseSchema,
            version="1.0.0",
            role=DataRole.RESPONSE,
            description="log10 solubility",
        ),
        "glass": SchemaInfo(
            name="glass",
            schema=GlassSchema,
            version="1.0.0",
            role=DataRole.COMBINED,
            description="Glass identification oxide measurements",
        ),
        "soybean": SchemaInfo(
            name="soybean",
            schema=SoybeanSchema,
            version="1.0.0",
            role=DataRole.COMBINED,
            description="Soybean categorical disease indicators",
        ),
        "tecator_absorbance": SchemaInfo(
            name="tecator_absorbance",
            schema=AbsorbanceSchema,
            version="1.0.0",
            role=DataRole.PREDICTORS,
            description="Infrared absorbance spectra of meat samples",
        ),
        "tecator_endpoints": SchemaInfo(
            name="tecator_endpoints",
            schema=EndpointSchema,
            version="1.0.0",
            role=DataRole.RESPONSE,
            description="Moisture, fat and protein percentages",
        ),
        "chemical_manufacturing": SchemaInfo(
            name="chemical_manufacturing",
            schema=ChemicalManufacturingSchema,
            version="1.0.0",
            role=DataRole.COMBINED,
            description="Chemical manufacturing process yield records",
        ),
        "permeability_fingerprints": SchemaInfo(
            name="permeability_fingerprints",
            schema=PermeabilityFingerprintSchema,
            version="1.0.0",
            role=DataRole.PREDICTORS,
            description="Binary molecular fingerprints",
        ),
        "permeability_response": SchemaInfo(
            name="permeability_response",
            schema=PermeabilityResponseSchema,
            version="1.0.0",
            role=DataRole.RESPONSE,
            description="Compound permeability",
        ),
        "friedman1": SchemaInfo(
            name="friedman1",
            schema=Friedman1Schema,
            version="1.0.0",
            role=DataRole.COMBINED,
            description="Simulated Friedman #1 benchmark",
        ),
        "prediction_table": SchemaInfo(
            name="prediction_table",
            schema=PredictionTableSchema,
            version="1.0.0",
            role=DataRole.OUTPUT,
            description="Observed vs predicted values with residuals",
        ),
        "prediction_output": SchemaInfo(
            name="prediction_output",
            schema=PredictionOutputSchema,
            version="1.0.0",
            role=DataRole.OUTPUT,
            description="Predictions on new data",
        ),
    }

    @classmethod
    def get(cls, name: str) -> type[pa.DataFrameModel]:
        """
        Get a schema by name.

        Raises:
            KeyError: If schema not found.
        """
        return cls.get_info(name).schema

    @classmethod
    def get_info(cls, name: str) -> SchemaInfo:
        """
        Get full schema info by name.

        Args:
            name: Schema identifier.

        Returns:
            SchemaInfo with metadata.
        """
        if name not in cls._schemas:
            available = ", ".join(cls._schemas.keys())
            msg = f"Unknown schema '{name}'. Available: {available}"
            raise KeyError(msg)
        return cls._schemas[name]

    @classmethod
    def list_schemas(cls) -> list[str]:
        """List all registered schema names."""
        return list(cls._schemas.keys())

    @classmethod
    def list_by_role(cls, role: DataRole) -> list[str]:
        """List schemas filtered by their data role."""
        return [name for name, info in cls._schemas.items() if info.role == role]

    @classmethod
    def validate(cls, df: "pd.DataFrame", schema_name: str) -> "pd.DataFrame":
        """
        Validate a DataFrame against a registered schema.

        Raises:
            pandera.errors.SchemaError: If validation fails.
            pandera.errors.SchemaErrors: If a strict schema sees unknown columns.
        """
        schema = cls.get(schema_name)
        return schema.validate(df)
