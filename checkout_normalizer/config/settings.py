"""Runtime configuration models for the checkout normalizer."""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..utils.phone import PhonePolicy

CATEGORY_UPPERCASE = "uppercase"
CATEGORY_LOWERCASE = "lowercase"
CATEGORY_PHONE = "phone"
CATEGORIES = (CATEGORY_UPPERCASE, CATEGORY_LOWERCASE, CATEGORY_PHONE)

SECTIONS = ("billing", "shipping", "order")


class CaseConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    remove_greek_accents: bool = True
    uppercase_strategy: str = "auto"

    @field_validator("uppercase_strategy")
    @classmethod
    def _known_strategy(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in {"auto", "transliteration", "table"}:
            raise ValueError(f"unknown uppercase strategy '{value}'")
        return value


class PhonePolicyConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    national_code: str = "30"
    type_markers: List[str] = Field(default_factory=lambda: ["6", "2"])
    national_length: int = 10
    group_sizes: List[int] = Field(default_factory=lambda: [3, 3, 4])

    def to_policy(self) -> PhonePolicy:
        return PhonePolicy(
            national_code=self.national_code,
            type_markers=tuple(self.type_markers),
            national_length=self.national_length,
            group_sizes=tuple(self.group_sizes),
        )


class PhoneConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    country_prefixes: List[str] = Field(default_factory=lambda: ["+30", "0030"])
    policy: PhonePolicyConfig = Field(default_factory=PhonePolicyConfig)


class SectionFields(BaseModel):
    """Field identifiers of one checkout section, grouped by transform."""

    model_config = ConfigDict(frozen=True)

    uppercase: List[str] = Field(default_factory=list)
    lowercase: List[str] = Field(default_factory=list)
    phone: List[str] = Field(default_factory=list)

    def all_fields(self) -> List[str]:
        return [*self.uppercase, *self.lowercase, *self.phone]


class FieldClassification(BaseModel):
    model_config = ConfigDict(frozen=True)

    billing: SectionFields = Field(default_factory=SectionFields)
    shipping: SectionFields = Field(default_factory=SectionFields)
    order: SectionFields = Field(default_factory=SectionFields)

    @model_validator(mode="after")
    def _categories_are_disjoint(self) -> "FieldClassification":
        seen: Dict[str, str] = {}
        for section in SECTIONS:
            fields: SectionFields = getattr(self, section)
            for category in CATEGORIES:
                for field in getattr(fields, category):
                    previous = seen.get(field)
                    if previous is not None:
                        raise ValueError(
                            f"field '{field}' is listed as both {previous} and {section}.{category}"
                        )
                    seen[field] = f"{section}.{category}"
        return self

    def section(self, name: str) -> SectionFields:
        return getattr(self, name)

    def category_of(self, field: str) -> Optional[str]:
        for section in SECTIONS:
            fields = self.section(section)
            for category in CATEGORIES:
                if field in getattr(fields, category):
                    return category
        return None

    def section_of(self, field: str) -> Optional[str]:
        for section in SECTIONS:
            if field in self.section(section).all_fields():
                return section
        return None

    def by_category(self, category: str) -> List[str]:
        return [field for section in SECTIONS for field in getattr(self.section(section), category)]


class RuntimeConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    metadata: dict = Field(default_factory=dict)
    case: CaseConfig = Field(default_factory=CaseConfig)
    phone: PhoneConfig = Field(default_factory=PhoneConfig)
    fields: FieldClassification = Field(default_factory=FieldClassification)
