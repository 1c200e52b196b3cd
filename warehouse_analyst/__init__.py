"""Warehouse floor-plan analysis service backed by a LiteLLM gateway.

The FastAPI application lives in :mod:`warehouse_analyst.main`.
"""

__version__ = "0.1.0"
