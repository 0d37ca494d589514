from pathlib import Path

from pysym.needle import Needle
from .messaging.bus import MessageBus

# Packaged message catalogs live next to this module; project overrides are
# picked up from <project>/.pysym/needle/<lang>/ by the runtime.
pysym_needle = Needle(asset_roots=[Path(__file__).parent / "assets"])

bus = MessageBus(needle=pysym_needle)

__all__ = ["bus", "pysym_needle", "MessageBus"]
