from typing import Any, Callable, Dict, Mapping, Optional

from core.exceptions import ConfigurationError
from forwarders import console

FORWARDERS: Dict[str, Callable[[Optional[Mapping[str, Any]]], Any]] = {
    "console": console.initialise,
}


def get_forwarder(name: str, options: Optional[Mapping[str, Any]] = None):
    """Initialise the forwarder registered under `name`."""
    if name not in FORWARDERS:
        raise ConfigurationError(f"Unknown forwarder '{name}'", details=sorted(FORWARDERS))
    return FORWARDERS[name](options)
