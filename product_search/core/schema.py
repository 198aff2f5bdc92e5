"""
Domain values for catalog search: items, match values, query outcomes and responses.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

from .errors import PortError


@dataclass(frozen=True)
class CatalogItem:
    id: int
    name: str
    description: str
    price: Decimal
    image_url: str = ""

    @classmethod
    def placeholder(cls) -> "CatalogItem":
        """Zero-valued item returned in the single `items` slot when nothing matched."""
        return cls(id=0, name="", description="", price=Decimal("0"), image_url="")

    def is_placeholder(self) -> bool:
        return self.id == 0 and not self.name

    def to_metadata(self) -> Dict[str, Any]:
        """Flat metadata stored beside the item's vector."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "price": str(self.price),
            "image_url": self.image_url,
        }

    @classmethod
    def from_metadata(cls, metadata: Dict[str, Any]) -> "CatalogItem":
        """
        Rebuild an item from vector metadata.

        Raises:
            KeyError: id or price missing
            decimal.InvalidOperation: price is not a number
        """
        return cls(
            id=int(metadata["id"]),
            name=str(metadata.get("name", "")),
            description=str(metadata.get("description", "")),
            price=Decimal(str(metadata["price"])),
            image_url=str(metadata.get("image_url", "")),
        )


@dataclass(frozen=True)
class Match:
    """Nearest item cleared the threshold."""
    item: CatalogItem
    score: float


@dataclass(frozen=True)
class NoMatch:
    """Nothing cleared the threshold. `best_score` is None for an empty index."""
    best_score: Optional[float] = None


MatchResult = Union[Match, NoMatch]


@dataclass
class SearchResponse:
    """Flat response shape kept for callers: generated text plus at most one item."""
    response: str
    items: List[CatalogItem] = field(default_factory=list)


# Internal per-query outcome. Only `to_search_response` flattens it.

@dataclass(frozen=True)
class Matched:
    item: CatalogItem
    score: float
    text: str


@dataclass(frozen=True)
class Unmatched:
    best_score: Optional[float]
    text: str


@dataclass(frozen=True)
class Failed:
    stage: str
    error: PortError


QueryOutcome = Union[Matched, Unmatched, Failed]


def degraded_message(stage: str) -> str:
    return f"Sorry, I couldn't complete your search right now ({stage} failed). Please try again."


def to_search_response(outcome: QueryOutcome) -> SearchResponse:
    """Serialize an internal query outcome to the flat response shape."""
    if isinstance(outcome, Matched):
        return SearchResponse(response=outcome.text, items=[outcome.item])
    if isinstance(outcome, Unmatched):
        return SearchResponse(response=outcome.text, items=[CatalogItem.placeholder()])
    return SearchResponse(response=degraded_message(outcome.stage), items=[CatalogItem.placeholder()])


@dataclass
class IndexFailure:
    item_id: int
    name: str
    stage: str
    message: str


@dataclass
class RebuildReport:
    indexed: int = 0
    failures: List[IndexFailure] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failures)
