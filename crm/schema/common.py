def reject_null(value):
    """Partial updates may omit a required column but never blank it."""
    if value is None:
        raise ValueError("Field may be omitted but not set to null")
    return value
