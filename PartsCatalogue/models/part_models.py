from typing import Any, Dict, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


# Part fields an admin may override through update_part_data
UPDATABLE_PART_FIELDS = ("notes", "year", "obsoleted_date", "alternative_parts", "visible")

FALSE_STRINGS = {"false", "0", "no", "off"}


class Part(BaseModel):
    """
    Effective catalogue record for one material code.

    Wire names follow the imported dataset (``SPRAS_EN``, ``Supplier_Name``);
    unknown fields from the import are kept as extras. Hand-edited records
    hold loosely typed values, so known fields are coerced rather than
    rejected.
    """
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    material: str
    description: Optional[str] = Field(default=None, alias="SPRAS_EN")
    supplier_name: Optional[str] = Field(default=None, alias="Supplier_Name")
    standard_price: Optional[Union[float, str]] = Field(default=None, alias="Standard_Price")
    visible: bool = True
    notes: Optional[str] = None
    year: Optional[str] = None
    obsoleted_date: Optional[str] = None
    alternative_parts: Optional[str] = None

    @field_validator("material", "description", "supplier_name", "notes", "year",
                     "obsoleted_date", "alternative_parts", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return value
        return str(value)

    @field_validator("standard_price", mode="before")
    @classmethod
    def coerce_price(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return value
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return value
        return str(value)

    @field_validator("visible", mode="before")
    @classmethod
    def coerce_visible(cls, value: Any) -> bool:
        # Only an explicit "off" value hides a part
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return value != 0
        if isinstance(value, str):
            return value.strip().lower() not in FALSE_STRINGS
        return True

    @classmethod
    def from_record(cls, material: str, record: Mapping[str, Any]) -> "Part":
        data = {k: v for k, v in record.items() if k != "material"}
        data["material"] = material
        return cls.model_validate(data)


class BoMComponent(BaseModel):
    """One row of a model/year bill of materials."""
    model_config = ConfigDict(populate_by_name=True)

    component_material: str = Field(alias="Component_Material")
    component_description: str = Field(default="", alias="Component_Description")
    standard_price: Union[float, str] = Field(default=0, alias="Standard_Price")
    supplier: str = Field(default="", alias="Supplier")

    @classmethod
    def from_record(cls, material: str, record: Dict[str, Any]) -> "BoMComponent":
        return cls(
            component_material=material,
            component_description=record.get("Component_Description") or "",
            standard_price=record.get("Standard_Price") or 0,
            supplier=record.get("Supplier") or "",
        )


class PartUpdate(BaseModel):
    """Admin override fields accepted by PATCH /api/parts/{material}."""
    model_config = ConfigDict(extra="forbid")

    notes: Optional[str] = None
    year: Optional[str] = None
    obsoleted_date: Optional[str] = None
    alternative_parts: Optional[str] = None
    visible: Optional[bool] = None


class PartsPage(BaseModel):
    items: Dict[str, Part] = {}
    next_cursor: Optional[str] = None
