"""Code-completion request pipeline for Fireworks-hosted infilling models."""

__version__ = "0.1.0"
