"""
Core Package

Contains the exchange-agnostic core logic including:
- ExchangeInterface: Abstract base class every earn adapter implements
- ExchangeManager: Registry that owns the adapters' lifecycle
- Schemas: The normalized Product model and the API envelope
- Signing: HMAC request signatures for authenticated exchange endpoints
- Exceptions: Vendor-scoped error hierarchy absorbed at the adapter boundary
"""
