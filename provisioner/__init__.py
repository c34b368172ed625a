"""Idempotent, dependency-ordered provisioning of the native OCR/ALPR tool chain."""

__version__ = "0.1.0"
