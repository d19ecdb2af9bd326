"""
Modeling layer: model registry, data partitioning, tuning and inference.

Every model is a scikit-learn pipeline whose preprocessing follows the
model's registry entry; hyperparameters are tuned by cross-validation.
"""
