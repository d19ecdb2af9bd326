"""
Pandera schemas for model output data.
"""

import pandas as pd
import pandera.pandas as pa
from pandera.typing import Series


class PredictionTableSchema(pa.DataFrameModel):
    """
    Schema for observed-vs-predicted tables.

    Written for both train and test partitions of every tuned model.
    """

    Actual: Series[float] = pa.Field(description="Observed response")
    Predicted: Series[float] = pa.Field(description="Model prediction")
    Residual: Series[float] = pa.Field(description="Actual minus Predicted")

    class Config:
        """Schema configuration."""

        name = "PredictionTableSchema"
        strict = True
        coerce = True

    @pa.dataframe_check
    def residual_is_consistent(cls, df: pd.DataFrame) -> Series[bool]:
        """Residual must equal Actual - Predicted."""
        return (df["Actual"] - df["Predicted"] - df["Residual"]).abs() < 1e-6


class PredictionOutputSchema(pa.DataFrameModel):
    """Schema for predictions on new data produced by the predict command."""

    predicted: Series[float] = pa.Field(description="Model prediction")

    class Config:
        """Schema configuration."""

        name = "PredictionOutputSchema"
        strict = False  # Input columns are carried along
        coerce = True
