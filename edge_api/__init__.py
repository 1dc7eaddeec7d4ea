"""Edge API gateway.

Aggregates small third-party JSON sources behind provider fallback chains
with short-lived response caching, and relays media and camera streams
with byte-range semantics intact.
"""

__version__ = "1.0.0"
