"""Post-run verification of installed tools.

Public API:
    - Verifier: Runs version probes
    - Probe: One tool to probe
    - NOT_FOUND: Value reported for missing tools
"""

from .verifier import NOT_FOUND, Probe, Verifier

__all__ = ["Verifier", "Probe", "NOT_FOUND"]
