"""
Pandera schema for the Friedman #1 simulation benchmark.

y = 10 sin(pi x1 x2) + 20 (x3 - 0.5)^2 + 10 x4 + 5 x5 + noise,
with x6..x10 uninformative.
"""

import pandera.pandas as pa
from pandera.typing import Series


class Friedman1Schema(pa.DataFrameModel):
    """Schema for simulated Friedman #1 data."""

    predictors: Series[float] = pa.Field(
        alias=r"^X\d+$",
        regex=True,
        ge=0.0,
        le=1.0,
        description="Uniform(0, 1) inputs",
    )
    y: Series[float] = pa.Field(description="Simulated response")

    class Config:
        """Schema configuration."""

        name = "Friedman1Schema"
        strict = True
        coerce = True
