def ok(data=None, message: str | None = None) -> dict:
    """Success envelope: ``{"success": true, "message", "data"}``, shaped by the route's ``Envelope`` model."""
    return {"success": True, "message": message, "data": data}
