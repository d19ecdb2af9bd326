"""
Pandera schemas for the Tecator meat spectroscopy data.

absorp: 100 infrared absorbance values (850-1050 nm) per sample.
endpoints: percent moisture, fat and protein determined analytically.
"""

import pandas as pd
import pandera.pandas as pa
from pandera.typing import Series

# Number of absorbance channels in the Tecator spectra
N_ABSORBANCE_CHANNELS = 100


class AbsorbanceSchema(pa.DataFrameModel):
    """Schema for infrared absorbance spectra after column renaming."""

    absorbance: Series[float] = pa.Field(
        alias=r"^absorp_\d{3}$",
        regex=True,
        ge=0.0,
        description="-log10 transmittance at one wavelength",
    )

    class Config:
        """Schema configuration."""

        name = "AbsorbanceSchema"
        strict = True
        coerce = True

    @pa.dataframe_check
    def has_all_channels(cls, df: pd.DataFrame) -> bool:
        """The spectrum must contain every absorbance channel."""
        return df.shape[1] == N_ABSORBANCE_CHANNELS


class EndpointSchema(pa.DataFrameModel):
    """Schema for analytical chemistry endpoints."""

    moisture: Series[float] = pa.Field(ge=0.0, le=100.0, description="Percent water")
    fat: Series[float] = pa.Field(ge=0.0, le=100.0, description="Percent fat")
    protein: Series[float] = pa.Field(ge=0.0, le=100.0, description="Percent protein")

    class Config:
        """Schema configuration."""

        name = "EndpointSchema"
        strict = True
        coerce = True
