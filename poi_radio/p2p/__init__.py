"""Transport bridge between POI radios.

Radios exchange signed `RadioMessage` payloads over plain HTTP:
- the gossip client POSTs every locally produced POI to each configured peer
- the relay app receives peer messages, recovers the sender from the signature,
  filters what this radio should not consume, and appends the rest to the
  ingestion buffer

Peer discovery is static (configured peer URLs); there is no mesh routing.
"""
