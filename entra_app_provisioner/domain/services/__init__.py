"""Domain services - Stateless operations on domain objects."""

from .consent_planner import ConsentDecision, ConsentPlanner

__all__ = ["ConsentDecision", "ConsentPlanner"]
