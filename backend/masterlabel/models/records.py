"""
实体记录 - 产品/批次/供应商输入数据

这些记录来自上游存储（JSON，camelCase键），组装器只读不写。
供应商记录沿用数据库列名（snake_case）。
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from .label_data import LabelVariant

CAMEL_CONFIG = {"alias_generator": to_camel, "populate_by_name": True}


class Material(BaseModel):
    """材料"""
    name: str
    percentage: float = 0
    recyclable: bool = False
    origin: str | None = None
    type: Literal["product", "packaging"] | None = None

    model_config = CAMEL_CONFIG


class Certification(BaseModel):
    """认证"""
    name: str
    issued_by: str = ""
    valid_until: str = ""

    model_config = CAMEL_CONFIG


class Recyclability(BaseModel):
    """回收信息"""
    recyclable_percentage: float = 0
    instructions: str = ""
    disposal_methods: list[str] = Field(default_factory=list)
    packaging_recyclable_percentage: float | None = None
    packaging_instructions: str | None = None
    packaging_disposal_methods: list[str] = Field(default_factory=list)

    model_config = CAMEL_CONFIG


class Supplier(BaseModel):
    """供应商（制造商/进口商）"""
    id: str | None = None
    name: str = ""
    address: str | None = None
    address_line2: str | None = None
    postal_code: str | None = None
    city: str | None = None
    country: str | None = None
    email: str | None = None
    phone: str | None = None


class ProductRecord(BaseModel):
    """产品记录"""
    name: str = ""
    gtin: str = ""
    batch_number: str | None = None
    category: str = ""
    manufacturer: str = ""
    manufacturer_address: str | None = None
    materials: list[Material] = Field(default_factory=list)
    certifications: list[Certification] = Field(default_factory=list)
    recyclability: Recyclability | None = None
    registrations: dict[str, str] = Field(default_factory=dict)
    gross_weight: float | None = None  # 克
    manufacturer_supplier_id: str | None = None
    importer_supplier_id: str | None = None

    model_config = CAMEL_CONFIG


class BatchRecord(BaseModel):
    """批次记录（覆盖字段非None时优先于产品）"""
    batch_number: str | None = None
    serial_number: str = ""
    quantity: int | None = None
    gross_weight: float | None = None
    materials_override: list[Material] | None = None
    certifications_override: list[Certification] | None = None
    recyclability_override: Recyclability | None = None

    model_config = CAMEL_CONFIG


class AssembleParams(BaseModel):
    """组装参数"""
    product: ProductRecord
    batch: BatchRecord | None = None
    manufacturer_supplier: Supplier | None = None
    importer_supplier: Supplier | None = None
    variant: LabelVariant = LabelVariant.B2B
    target_country: str = ""
    dpp_url: str = ""
    qr_data_url: str = ""

    model_config = CAMEL_CONFIG
