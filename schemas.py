"""
Store Schemas

Pydantic models for the records kept in the JSON store and for the
request bodies of the shop API.

Stored documents use camelCase keys (primaryColor, createdAt, imageUrl...),
so fields are declared snake_case with an alias and dumped with
model_dump(by_alias=True).
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional

DEFAULT_TEMPLATE = "ecommerce"
DEFAULT_PRIMARY_COLOR = "#3B82F6"
DEFAULT_SECONDARY_COLOR = "#F3F4F6"
DEFAULT_FONT_FAMILY = "Inter"
DEFAULT_LAYOUT = "modern"


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# -----------------------------
# Shop records
# -----------------------------

class Product(CamelModel):
    """
    Product embedded in a shop, displayed in list order.
    Extra keys sent by the dashboard are kept as-is.
    """
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str = Field(..., description="Product name")
    description: Optional[str] = Field(None, description="Short description")
    price: float = Field(..., description="Price in euros")
    image_url: Optional[str] = Field(None, alias="imageUrl")


class Theme(CamelModel):
    primary_color: str = Field(DEFAULT_PRIMARY_COLOR, alias="primaryColor")
    secondary_color: str = Field(DEFAULT_SECONDARY_COLOR, alias="secondaryColor")
    font_family: str = Field(DEFAULT_FONT_FAMILY, alias="fontFamily")
    layout: str = DEFAULT_LAYOUT


class Seo(CamelModel):
    title: str
    description: str
    keywords: str


class ShopConfig(CamelModel):
    theme: Theme
    seo: Seo


class ShopStats(CamelModel):
    views: int = Field(0, ge=0)
    created_at: str = Field(..., alias="createdAt")
    last_visit: Optional[str] = Field(None, alias="lastVisit")


class Shop(CamelModel):
    """
    One tenant. Stored under shops[slug] in the store document.
    """
    id: str
    name: str
    slug: str = Field(..., description="Subdomain label and store key")
    template: str = DEFAULT_TEMPLATE
    config: ShopConfig
    products: List[Product] = []
    stats: ShopStats


# -----------------------------
# Stored shape after an update
# -----------------------------
#
# Updates replace top-level keys wholesale, so a stored config may lack
# theme or seo entries. These models check value types only.

class ThemeRecord(CamelModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    primary_color: Optional[str] = Field(None, alias="primaryColor")
    secondary_color: Optional[str] = Field(None, alias="secondaryColor")
    font_family: Optional[str] = Field(None, alias="fontFamily")
    layout: Optional[str] = None


class SeoRecord(CamelModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    title: Optional[str] = None
    description: Optional[str] = None
    keywords: Optional[str] = None


class ConfigRecord(CamelModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    theme: Optional[ThemeRecord] = None
    seo: Optional[SeoRecord] = None


class StatsRecord(CamelModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    views: int = Field(0, ge=0)
    created_at: Optional[str] = Field(None, alias="createdAt")
    last_visit: Optional[str] = Field(None, alias="lastVisit")


class ShopRecord(CamelModel):
    """
    A shop as it may be stored after updates. Dump with
    model_dump(by_alias=True, exclude_unset=True) to keep the given keys only.
    """
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str
    name: str = Field(..., min_length=1)
    slug: str = Field(..., min_length=1)
    template: str = DEFAULT_TEMPLATE
    config: Optional[ConfigRecord] = None
    products: List[Product] = []
    stats: StatsRecord = StatsRecord()


# -----------------------------
# Request bodies
# -----------------------------

class ShopCreate(BaseModel):
    """
    POST /api/shops body. name and slug are checked by the repository
    so a missing value answers 400 rather than a schema error.
    """
    name: Optional[str] = None
    slug: Optional[str] = None
    template: Optional[str] = None
    config: Optional[Dict[str, Any]] = None
    products: Optional[List[Product]] = None
