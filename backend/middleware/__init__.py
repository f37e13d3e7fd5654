"""
Sai Ren Agent Middleware - Request processing middleware.

- single_flight: bounded, non-queuing concurrency gate for expensive endpoints
"""

from .single_flight import SingleFlightGate, SingleFlightMiddleware

__all__ = ["SingleFlightGate", "SingleFlightMiddleware"]
