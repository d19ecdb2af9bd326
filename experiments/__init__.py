"""
Exercise scripts.

Each script answers one question about a benchmark dataset:
- solubility_linear: How far do linear models get on aqueous solubility?
- tecator_latent: How many latent directions do the absorbance spectra need?
- permeability_pls: Does a sparse model beat PLS on binary fingerprints?
- chemical_manufacturing: Which process predictors drive yield?
- friedman_nonlinear: Which nonlinear model recovers the Friedman surface?
- categorical_exploration: What do the glass and soybean predictors look like?
"""
