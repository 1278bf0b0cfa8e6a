from poi_radio.p2p.relay.app import create_app

__all__ = ["create_app"]
