"""
Wire models for the catalog search API.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional

from ..core.schema import CatalogItem, IndexFailure, RebuildReport, SearchResponse


class ProductModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    name: str
    description: str
    price: float
    image_url: str = Field(default="", alias="imageUrl")

    @classmethod
    def from_item(cls, item: CatalogItem) -> "ProductModel":
        return cls(
            id=item.id,
            name=item.name,
            description=item.description,
            price=float(item.price),
            image_url=item.image_url,
        )


class SearchResponseModel(BaseModel):
    response: str
    items: List[ProductModel]

    @classmethod
    def from_response(cls, search_response: SearchResponse) -> "SearchResponseModel":
        return cls(
            response=search_response.response,
            items=[ProductModel.from_item(item) for item in search_response.items],
        )


class IndexFailureModel(BaseModel):
    item_id: int
    name: str
    stage: str
    message: str

    @classmethod
    def from_failure(cls, failure: IndexFailure) -> "IndexFailureModel":
        return cls(item_id=failure.item_id, name=failure.name, stage=failure.stage, message=failure.message)


class RebuildResponse(BaseModel):
    indexed: int
    failed: int
    failures: List[IndexFailureModel]

    @classmethod
    def from_report(cls, report: RebuildReport) -> "RebuildResponse":
        return cls(
            indexed=report.indexed,
            failed=report.failed,
            failures=[IndexFailureModel.from_failure(f) for f in report.failures],
        )


class HealthResponse(BaseModel):
    status: str
    version: str
    profile: str
    db_health: bool
    catalog_count: int
    indexed_count: int
    collection: str
    last_rebuild: Optional[RebuildResponse] = None
