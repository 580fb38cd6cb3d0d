"""Public entry point and response models."""
