class SchemaMismatch(ValueError):
    """Raised when a raw payload lacks a path or field the schema requires"""
    pass

class GatewayError(Exception):
    """Raised when a Spark API request fails or is made without a session"""
    pass
