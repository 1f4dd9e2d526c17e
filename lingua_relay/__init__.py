"""
Lingua Relay — multilingual chat relay in front of the OpenAI Responses API.

Packages:
- core          : config, language policy, error taxonomy, relay
- providers     : upstream client (OpenAI Responses API)
- runtime_state : in-memory session store
- routers       : FastAPI routes
- models        : HTTP request/response schemas
- utils         : logging + timing helpers
"""

__version__ = "0.1.0"
