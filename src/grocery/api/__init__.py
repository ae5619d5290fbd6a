"""HTTP API package: one router module per area, plus auth and the error envelope.

Routers are imported where they are mounted (``app.py``), so importing any
module of this package never pulls in the others.
"""
