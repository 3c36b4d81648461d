# recipe_engine/core/config.py
from __future__ import annotations
from dataclasses import dataclass
import os
import logging

# Mongo settings
MONGO_URI: str = os.getenv("MONGO_URI", "mongodb://localhost:27017")
MONGO_DB: str = os.getenv("MONGO_DB", "kitchen")
MONGO_INGREDIENTS_COL: str = os.getenv("MONGO_INGREDIENTS_COL", "ingredients")
MONGO_PREPARATIONS_COL: str = os.getenv("MONGO_PREPARATIONS_COL", "preparations")
MONGO_DISHES_COL: str = os.getenv("MONGO_DISHES_COL", "dishes")
MONGO_UNITS_COL: str = os.getenv("MONGO_UNITS_COL", "units")

# Resolution
CLOSE_MATCH_LIMIT: int = int(os.getenv("CLOSE_MATCH_LIMIT", "10"))
RESOLUTION_TTL_SECONDS: int = int(os.getenv("RESOLUTION_TTL_SECONDS", "0"))
DISH_CANCEL_POLICY: str = os.getenv("DISH_CANCEL_POLICY", "abort").lower()
PREPARATION_CANCEL_POLICY: str = os.getenv("PREPARATION_CANCEL_POLICY", "create").lower()

# Reserved units. The preparation unit row is created by the catalog migration.
PREPARATION_UNIT_ID: str = os.getenv("PREPARATION_UNIT_ID", "13bcd39d-c167-4edc-902e-6b61443e7986")
PREPARATION_UNIT_ABBR: str = os.getenv("PREPARATION_UNIT_ABBR", "prep")
COUNT_UNIT_ABBR: str = os.getenv("COUNT_UNIT_ABBR", "x")

# "" keeps the plain fingerprint string, "sha1" stores its 160-bit digest instead
FINGERPRINT_DIGEST: str = os.getenv("FINGERPRINT_DIGEST", "").lower()

CANCEL_POLICIES = ("abort", "create")


@dataclass(frozen=True)
class ResolutionPolicy:
    """What a "cancel" answer means for each entity kind.

    abort  -> the resolver returns ``cancel`` and the caller drops the save
    create -> the resolver returns ``new`` and the caller creates the item anyway
    """
    dish_cancel: str = "abort"
    preparation_cancel: str = "create"

    def __post_init__(self) -> None:
        for value in (self.dish_cancel, self.preparation_cancel):
            if value not in CANCEL_POLICIES:
                raise ValueError(f"Unknown cancel policy: {value!r} (expected one of {CANCEL_POLICIES})")

    @classmethod
    def from_env(cls) -> "ResolutionPolicy":
        return cls(dish_cancel=DISH_CANCEL_POLICY, preparation_cancel=PREPARATION_CANCEL_POLICY)


# Global logging (module-level loggers inherit this)
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
LOGGER = logging.getLogger("recipe_engine")
