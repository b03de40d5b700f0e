"""Routing: fee deduction, mint-vs-pool selection and execution."""

from tokenomics.routing.executor import SwapExecutor
from tokenomics.routing.router import Router
from tokenomics.routing.selector import RouteSelector
from tokenomics.routing.types import ExecutionResult, Route, RouteQuote, SwapOutcome

__all__ = [
    "ExecutionResult",
    "Route",
    "RouteQuote",
    "RouteSelector",
    "Router",
    "SwapExecutor",
    "SwapOutcome",
]
