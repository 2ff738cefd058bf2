"""Call-signaling engine.

Presence registry, call-session state machine and the relay that forwards
offer/answer/ICE payloads between the two parties of a call. Media never
passes through here: peers connect directly once signaling completes.
"""
