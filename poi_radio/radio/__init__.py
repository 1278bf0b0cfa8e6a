from poi_radio.radio.context import RadioContext, build_context
from poi_radio.radio.networks import NetworkRegistry
from poi_radio.radio.scheduler import BlockScheduler, PoiDivergedError, message_block_for

__all__ = [
    "BlockScheduler",
    "NetworkRegistry",
    "PoiDivergedError",
    "RadioContext",
    "build_context",
    "message_block_for",
]
