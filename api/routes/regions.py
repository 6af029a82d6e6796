"""
Reference data routes: regions and brands.
"""

from typing import List

from fastapi import APIRouter
from pydantic import BaseModel

from distribution.regions import NAAMSA_BRANDS, SA_REGIONS, neighbors_of

router = APIRouter()


class RegionOut(BaseModel):
    name: str
    neighbors: List[str]


class BrandOut(BaseModel):
    id: str
    name: str
    tier: str


@router.get("/regions", response_model=List[RegionOut])
async def list_regions():
    """Regions with their neighbors in fallback order."""
    return [RegionOut(name=r, neighbors=neighbors_of(r)) for r in SA_REGIONS]


@router.get("/brands", response_model=List[BrandOut])
async def list_brands():
    return [BrandOut(id=b.id, name=b.name, tier=b.tier) for b in NAAMSA_BRANDS]
