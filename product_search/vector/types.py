"""
Records stored in and returned from a vector collection.
"""

from typing import Dict, Optional
import numpy as np
from dataclasses import dataclass


@dataclass
class VectorRecord:
    """Represents a vector record with metadata."""

    id: int
    """Catalog item id the vector was derived from"""

    vector: Optional[np.ndarray]
    """The embedding of the item's description"""

    metadata: Dict[str, object]
    """Item fields stored beside the vector"""


@dataclass
class QueryResult:
    """Represents a search result from vector store."""

    id: int
    """Identifier for the matching record"""

    score: float
    """Cosine similarity of the match"""

    metadata: Dict[str, object]
    """Metadata associated with the matched record"""
