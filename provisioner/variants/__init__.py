"""Built-in step lists for each supported host OS.

Public API:
    - get_variant: Build the variant for a target
    - Variant: Steps, probes and adapters for one OS family
"""

from provisioner.config import POSIX, WINDOWS, ProvisionConfig

from .models import Variant
from .posix import posix_variant
from .windows import windows_variant

_FACTORIES = {
    POSIX: posix_variant,
    WINDOWS: windows_variant,
}


def get_variant(target: str, config: ProvisionConfig) -> Variant:
    """Return the built-in variant for ``target``.

    Raises:
        ValueError: Unknown target.
    """
    try:
        factory = _FACTORIES[target]
    except KeyError:
        raise ValueError(f"Unknown target {target!r}; expected one of {sorted(_FACTORIES)}") from None
    return factory(config)


__all__ = ["Variant", "get_variant"]
