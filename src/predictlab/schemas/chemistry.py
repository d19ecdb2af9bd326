"""
Pandera schemas for the chemical descriptor datasets.

Covers the aqueous solubility data (binary fingerprints plus continuous
descriptors) and the permeability data (binary substructure fingerprints).
"""

import pandera.pandas as pa
from pandera.typing import Series


class SolubilityPredictorSchema(pa.DataFrameModel):
    """
    Schema for solubility predictors (solTrainX / solTestX).

    208 binary fingerprint columns FP001..FP208 and 20 count or continuous
    descriptors. Only a representative subset of descriptors is required.
    """

    fingerprints: Series[int] = pa.Field(
        alias=r"^FP\d{3}$",
        regex=True,
        isin=[0, 1],
        description="Binary chemical substructure indicators",
    )
    MolWeight: Series[float] = pa.Field(gt=0, description="Molecular weight")
    NumAtoms: Series[int] = pa.Field(ge=0, description="Number of atoms")
    NumBonds: Series[int] = pa.Field(ge=0, description="Number of bonds")
    HydrophilicFactor: Series[float] = pa.Field(description="Hydrophilic factor")
    SurfaceArea1: Series[float] = pa.Field(ge=0, description="Surface area (1)")
    SurfaceArea2: Series[float] = pa.Field(ge=0, description="Surface area (2)")

    class Config:
        """Schema configuration."""

        name = "SolubilityPredictorSchema"
        strict = False  # Remaining count descriptors are passed through
        coerce = True


class SolubilityResponseSchema(pa.DataFrameModel):
    """Schema for solubility response (log10 of solubility)."""

    solubility: Series[float] = pa.Field(
        ge=-15.0,
        le=5.0,
        description="log10 aqueous solubility",
    )

    class Config:
        """Schema configuration."""

        name = "SolubilityResponseSchema"
        strict = True
        coerce = True


class PermeabilityFingerprintSchema(pa.DataFrameModel):
    """
    Schema for permeability fingerprints.

    1107 binary molecular fingerprint columns (X1..X1107), mostly sparse.
    """

    fingerprints: Series[int] = pa.Field(
        alias=r"^X\d+$",
        regex=True,
        isin=[0, 1],
        description="Binary molecular fingerprint bits",
    )

    class Config:
        """Schema configuration."""

        name = "PermeabilityFingerprintSchema"
        strict = True
        coerce = True


class PermeabilityResponseSchema(pa.DataFrameModel):
    """Schema for measured compound permeability."""

    permeability: Series[float] = pa.Field(
        ge=0.0,
        description="Permeability (PAMPA assay)",
    )

    class Config:
        """Schema configuration."""

        name = "PermeabilityResponseSchema"
        strict = True
        coerce = True
