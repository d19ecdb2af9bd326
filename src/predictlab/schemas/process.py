"""
Pandera schema for the chemical manufacturing process data.

176 batches with 12 biological starting-material measurements,
45 manufacturing process measurements, and the product yield.
Process measurements contain missing values.
"""

import pandera.pandas as pa
from pandera.typing import Series


class ChemicalManufacturingSchema(pa.DataFrameModel):
    """Schema for ChemicalManufacturingProcess."""

    Yield: Series[float] = pa.Field(
        gt=0.0,
        le=100.0,
        description="Percent yield of the batch",
    )
    biological: Series[float] = pa.Field(
        alias=r"^BiologicalMaterial\d{2}$",
        regex=True,
        nullable=True,
        description="Raw biological material quality measurements",
    )
    process: Series[float] = pa.Field(
        alias=r"^ManufacturingProcess\d{2}$",
        regex=True,
        nullable=True,
        description="Manufacturing process settings and readings",
    )

    class Config:
        """Schema configuration."""

        name = "ChemicalManufacturingSchema"
        strict = True
        coerce = True
