"""
Region and brand reference data for AutoLead SA.

The adjacency table drives the regional fallback of the distributor:
neighbors are listed in the order they should be tried.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


SA_REGIONS: List[str] = [
    "Gauteng",
    "Western Cape",
    "KwaZulu-Natal",
    "Eastern Cape",
    "Free State",
    "Mpumalanga",
    "North West",
    "Limpopo",
    "Northern Cape",
]

# Nearest-region fallback order
REGION_ADJACENCY: Dict[str, List[str]] = {
    "Gauteng": ["North West", "Mpumalanga", "Free State", "Limpopo"],
    "Western Cape": ["Eastern Cape", "Northern Cape"],
    "KwaZulu-Natal": ["Free State", "Mpumalanga", "Eastern Cape"],
    "Eastern Cape": ["Western Cape", "KwaZulu-Natal", "Free State", "Northern Cape"],
    "Free State": ["Gauteng", "North West", "Mpumalanga", "KwaZulu-Natal", "Eastern Cape", "Northern Cape"],
    "Mpumalanga": ["Gauteng", "Limpopo", "KwaZulu-Natal", "Free State"],
    "North West": ["Gauteng", "Limpopo", "Free State", "Northern Cape"],
    "Limpopo": ["Gauteng", "Mpumalanga", "North West"],
    "Northern Cape": ["Western Cape", "Eastern Cape", "Free State", "North West"],
}


def neighbors_of(region: Optional[str], adjacency: Optional[Dict[str, List[str]]] = None) -> List[str]:
    """
    Ordered neighbor list for a region, looked up case-insensitively.

    Args:
        region: Region name as entered on the lead or dealer
        adjacency: Graph to use (defaults to REGION_ADJACENCY)

    Returns:
        Copy of the neighbor list, empty for unknown regions
    """
    graph = REGION_ADJACENCY if adjacency is None else adjacency
    if not region:
        return []

    if region in graph:
        return list(graph[region])

    wanted = region.strip().lower()
    for name, neighbors in graph.items():
        if name.lower() == wanted:
            return list(neighbors)

    logger.debug(f"Region not in adjacency graph: {region}")
    return []


def is_known_region(region: Optional[str]) -> bool:
    """Check a region name against the fixed SA region list."""
    if not region:
        return False
    wanted = region.strip().lower()
    return any(r.lower() == wanted for r in SA_REGIONS)


@dataclass(frozen=True)
class Brand:
    """NAAMSA brand catalog entry."""
    id: str
    name: str
    tier: str  # Volume, Luxury, Commercial


NAAMSA_BRANDS: List[Brand] = [
    Brand("alfa-romeo", "Alfa Romeo", "Luxury"),
    Brand("audi", "Audi", "Luxury"),
    Brand("baic", "BAIC", "Volume"),
    Brand("bentley", "Bentley", "Luxury"),
    Brand("bmw", "BMW", "Luxury"),
    Brand("byd", "BYD", "Volume"),
    Brand("chery", "Chery", "Volume"),
    Brand("citroen", "Citroen", "Volume"),
    Brand("ferrari", "Ferrari", "Luxury"),
    Brand("fiat", "Fiat", "Volume"),
    Brand("ford", "Ford", "Volume"),
    Brand("gwm", "GWM", "Volume"),
    Brand("haval", "Haval", "Volume"),
    Brand("hino", "Hino", "Commercial"),
    Brand("honda", "Honda", "Volume"),
    Brand("hyundai", "Hyundai", "Volume"),
    Brand("ineos", "Ineos", "Luxury"),
    Brand("isuzu", "Isuzu", "Commercial"),
    Brand("iveco", "Iveco", "Commercial"),
    Brand("jac", "JAC", "Commercial"),
    Brand("jaecoo", "Jaecoo", "Volume"),
    Brand("jaguar", "Jaguar", "Luxury"),
    Brand("jeep", "Jeep", "Luxury"),
    Brand("kia", "Kia", "Volume"),
    Brand("lamborghini", "Lamborghini", "Luxury"),
    Brand("land-rover", "Land Rover", "Luxury"),
    Brand("lexus", "Lexus", "Luxury"),
    Brand("mahindra", "Mahindra", "Volume"),
    Brand("man", "MAN", "Commercial"),
    Brand("maserati", "Maserati", "Luxury"),
    Brand("mazda", "Mazda", "Volume"),
    Brand("mercedes", "Mercedes-Benz", "Luxury"),
    Brand("mini", "Mini", "Luxury"),
    Brand("mitsubishi", "Mitsubishi", "Volume"),
    Brand("nissan", "Nissan", "Volume"),
    Brand("omoda", "Omoda", "Volume"),
    Brand("opel", "Opel", "Volume"),
    Brand("peugeot", "Peugeot", "Volume"),
    Brand("porsche", "Porsche", "Luxury"),
    Brand("proton", "Proton", "Volume"),
    Brand("renault", "Renault", "Volume"),
    Brand("scania", "Scania", "Commercial"),
    Brand("subaru", "Subaru", "Volume"),
    Brand("suzuki", "Suzuki", "Volume"),
    Brand("tata", "Tata", "Commercial"),
    Brand("toyota", "Toyota", "Volume"),
    Brand("ud-trucks", "UD Trucks", "Commercial"),
    Brand("volkswagen", "Volkswagen", "Volume"),
    Brand("volvo", "Volvo", "Luxury"),
]

_BRANDS_BY_ID: Dict[str, Brand] = {b.id: b for b in NAAMSA_BRANDS}


def brand_display_name(brand: str) -> str:
    """
    Resolve a catalog brand id (e.g. "land-rover") to its display name.

    Names that are not catalog ids are returned unchanged.
    """
    entry = _BRANDS_BY_ID.get(brand.strip().lower()) if brand else None
    return entry.name if entry else brand
