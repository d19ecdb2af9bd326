"""
Pandera schemas for the categorical-response datasets.

Glass: 214 fragments, refractive index and 8 oxide percentages, 6 glass types.
Soybean: 683 plants, 35 categorical disease indicators coded as small
integers with missing values, 19 disease classes.
"""

import pandas as pd
import pandera.pandas as pa
from pandera.typing import Series

# Largest number of levels among the soybean indicator factors
SOYBEAN_MAX_LEVELS = 7


class GlassSchema(pa.DataFrameModel):
    """Schema for glass identification measurements."""

    RI: Series[float] = pa.Field(ge=1.0, le=2.0, description="Refractive index")
    Na: Series[float] = pa.Field(ge=0.0, le=100.0, description="Sodium oxide (wt %)")
    Mg: Series[float] = pa.Field(ge=0.0, le=100.0, description="Magnesium oxide")
    Al: Series[float] = pa.Field(ge=0.0, le=100.0, description="Aluminum oxide")
    Si: Series[float] = pa.Field(ge=0.0, le=100.0, description="Silicon oxide")
    K: Series[float] = pa.Field(ge=0.0, le=100.0, description="Potassium oxide")
    Ca: Series[float] = pa.Field(ge=0.0, le=100.0, description="Calcium oxide")
    Ba: Series[float] = pa.Field(ge=0.0, le=100.0, description="Barium oxide")
    Fe: Series[float] = pa.Field(ge=0.0, le=100.0, description="Iron oxide")
    Type: Series[str] = pa.Field(description="Glass type label")

    class Config:
        """Schema configuration."""

        name = "GlassSchema"
        strict = True
        coerce = True


class SoybeanSchema(pa.DataFrameModel):
    """Schema for soybean disease indicators."""

    Class: Series[str] = pa.Field(description="Disease class")
    date: Series[float] = pa.Field(
        ge=0, le=6, nullable=True, description="Month of occurrence (April=0)"
    )
    leaves: Series[float] = pa.Field(
        isin=[0, 1], nullable=True, description="Leaves normal (0) / abnormal (1)"
    )

    class Config:
        """Schema configuration."""

        name = "SoybeanSchema"
        strict = False  # Remaining indicators are checked by level count
        coerce = True

    @pa.dataframe_check
    def indicators_are_low_cardinality(cls, df: pd.DataFrame) -> bool:
        """Every predictor must look like a coded factor."""
        predictors = df.drop(columns=["Class"])
        return bool((predictors.nunique(dropna=True) <= SOYBEAN_MAX_LEVELS).all())
