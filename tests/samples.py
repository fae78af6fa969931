from typing import Any


def draft_data(**overrides: Any) -> dict[str, Any]:
    """Model output in the camelCase shape the generator schema expects."""
    data: dict[str, Any] = {
        "recipeName": "Citra Sunrise",
        "detectedStyle": "American Pale Ale",
        "grains": [
            {"name": "Pale Malt", "weight": 4500},
            {"name": "Crystal 40", "weight": 300},
        ],
        "hops": [
            {"name": "Magnum", "weight": 15, "format": "Pellets", "alphaAcid": 13},
            {"name": "Citra", "weight": 50, "format": "Pellets", "alphaAcid": 12.5},
        ],
        "yeast": {"name": "US-05", "type": "Ale", "weight": 11.5},
        "additionalIngredients": [
            {"name": "Irish Moss", "weight": 5, "description": "for clarity"},
        ],
        "instructions": "1. Mash at 66°C for 60 minutes.\n2. Boil for 60 minutes.",
        "originalGravity": "1.050",
        "finalGravity": "1.010",
        "color": "12",
        "bitterness": "35",
        "alcoholContent": "5.5%",
    }
    data.update(overrides)
    return data
