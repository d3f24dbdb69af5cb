"""
Gestión de Clientes service

Customer record management against the remote customer API:
- RUT (Chilean national ID) validation and formatting
- Region/commune reference table for cascading selectors
- HTTPX client with retries and exponential backoff
- Pydantic settings for configuration
- Structured JSON logging with structlog
- CLI interface
"""

__version__ = "0.1.0"
