"""
Data Transfer Objects for business listings.
"""
from dataclasses import dataclass
from typing import List, Optional

from .models import Business, Event


@dataclass
class RankedBusiness:
    """A business with its distance from the requesting user, when known."""
    business: Business
    distance: Optional[float] = None


@dataclass
class BusinessDetail:
    business: Business
    events: List[Event]
