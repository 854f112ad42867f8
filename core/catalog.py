"""
Enumerations of the leagues, categories and dataset types poe.ninja serves.

Each enumeration is a static ordered set with a designated default:

    Category.from_name("Item")               -> Category.ITEM
    League.from_name_or_default("nope")      -> (False, League.default())
    [t.value for t in CurrencyType]          -> ["Currency", "Fragment"]

Names are matched exactly, the same way they are typed on the command line.
"""
from __future__ import annotations

from enum import Enum
from typing import Optional, Tuple, Type, TypeVar, Union

E = TypeVar("E", bound="CatalogEnum")


class DatasetFamily(Enum):
    """Record shape plus endpoint a dataset type belongs to."""
    CURRENCY = "currency"
    ITEM = "item"

    def __str__(self) -> str:
        return self.value


class CatalogEnum(Enum):
    """Shared lookup helpers for the catalog enumerations."""

    def __str__(self) -> str:
        return self.value

    @classmethod
    def default(cls: Type[E]) -> E:
        """Get the default variant."""
        raise NotImplementedError

    @classmethod
    def from_name(cls: Type[E], name: Optional[str]) -> Optional[E]:
        """
        Look up a variant by its exact name.

        Args:
            name: Name as shown by ``list`` (e.g. "Hardcore+Necropolis")

        Returns:
            The variant or None if the name is not valid
        """
        if not name:
            return None
        for variant in cls:
            if variant.value == name:
                return variant
        return None

    @classmethod
    def from_name_or_default(cls: Type[E], name: Optional[str]) -> Tuple[bool, E]:
        """
        Look up a variant, substituting the default when the name is invalid.

        Returns:
            (found, variant) where found is False if the default was used
        """
        variant = cls.from_name(name)
        if variant is not None:
            return True, variant
        return False, cls.default()

    @classmethod
    def names(cls) -> list[str]:
        """All valid names in declaration order."""
        return [variant.value for variant in cls]


class Category(CatalogEnum):
    CURRENCY = "Currency"
    ITEM = "Item"

    @classmethod
    def default(cls) -> "Category":
        return cls.CURRENCY

    @property
    def family(self) -> DatasetFamily:
        if self is Category.CURRENCY:
            return DatasetFamily.CURRENCY
        return DatasetFamily.ITEM


class League(CatalogEnum):
    STANDARD = "Standard"
    HARDCORE = "Hardcore"
    RUTHLESS = "Ruthless"
    HC_RUTHLESS = "Hardcore+Ruthless"

    NECROPOLIS = "Necropolis"
    NECROPOLIS_HC = "Hardcore+Necropolis"
    NECROPOLIS_RUTHLESS = "Ruthless+Necropolis"
    NECROPOLIS_HC_RUTHLESS = "HC+Ruthless+Necropolis"

    AFFLICTION = "Affliction"
    AFFLICTION_HC = "Hardcore+Affliction"
    AFFLICTION_RUTHLESS = "Ruthless+Affliction"
    AFFLICTION_HC_RUTHLESS = "HC+Ruthless+Affliction"

    @classmethod
    def default(cls) -> "League":
        return cls.NECROPOLIS

    @property
    def api_name(self) -> str:
        """League name as poe.ninja expects it in the query string."""
        # '+' stands for a space in the names users type
        return self.value.replace("+", " ")


class CurrencyType(CatalogEnum):
    CURRENCY = "Currency"
    FRAGMENT = "Fragment"

    @classmethod
    def default(cls) -> "CurrencyType":
        return cls.CURRENCY

    @property
    def family(self) -> DatasetFamily:
        return DatasetFamily.CURRENCY


class ItemType(CatalogEnum):
    TATTOO = "Tattoo"
    OMEN = "Omen"
    DIVINATION_CARD = "DivinationCard"
    ARTIFACT = "Artifact"
    OIL = "Oil"
    INCUBATOR = "Incubator"
    UNIQUE_WEAPON = "UniqueWeapon"
    UNIQUE_ARMOUR = "UniqueArmour"
    UNIQUE_ACCESSORY = "UniqueAccessory"
    UNIQUE_FLASK = "UniqueFlask"
    UNIQUE_JEWEL = "UniqueJewel"
    UNIQUE_RELIC = "UniqueRelic"
    SKILL_GEM = "SkillGem"
    CLUSTER_JEWEL = "ClusterJewel"
    MAP = "Map"
    BLIGHTED_MAP = "BlightedMap"
    BLIGHT_RAVAGED_MAP = "BlightRavagedMap"
    SCOURGED_MAP = "ScourgedMap"
    UNIQUE_MAP = "UniqueMap"
    DELIRIUM_ORB = "DeliriumOrb"
    INVITATION = "Invitation"
    SCARAB = "Scarab"
    MEMORY = "Memory"
    BASE_TYPE = "BaseType"
    FOSSIL = "Fossil"
    RESONATOR = "Resonator"
    BEAST = "Beast"
    ESSENCE = "Essence"
    VIAL = "Vial"

    @classmethod
    def default(cls) -> "ItemType":
        return cls.TATTOO

    @property
    def family(self) -> DatasetFamily:
        return DatasetFamily.ITEM


DatasetType = Union[CurrencyType, ItemType]

# Dataset type enumeration per category
TYPES_BY_CATEGORY: dict[Category, Type[CatalogEnum]] = {
    Category.CURRENCY: CurrencyType,
    Category.ITEM: ItemType,
}
