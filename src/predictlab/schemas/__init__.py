"""
Schema definitions using Pandera for data validation.

All dataset contracts are defined here so that malformed files are
rejected at load time rather than deep inside a model fit.
"""

from predictlab.schemas.categorical import GlassSchema, SoybeanSchema
from predictlab.schemas.chemistry import (
    PermeabilityFingerprintSchema,
    PermeabilityResponseSchema,
    SolubilityPredictorSchema,
    SolubilityResponseSchema,
)
from predictlab.schemas.output import PredictionOutputSchema, PredictionTableSchema
from predictlab.schemas.process import ChemicalManufacturingSchema
from predictlab.schemas.registry import DataRole, SchemaRegistry
from predictlab.schemas.simulated import Friedman1Schema
from predictlab.schemas.spectra import AbsorbanceSchema, EndpointSchema

__all__ = [
    "AbsorbanceSchema",
    "ChemicalManufacturingSchema",
    "DataRole",
    "EndpointSchema",
    "Friedman1Schema",
    "GlassSchema",
    "PermeabilityFingerprintSchema",
    "PermeabilityResponseSchema",
    "PredictionOutputSchema",
    "PredictionTableSchema",
    "SchemaRegistry",
    "SolubilityPredictorSchema",
    "SolubilityResponseSchema",
    "SoybeanSchema",
]
