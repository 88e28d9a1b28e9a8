"""
标签设计模型 - 分区/元素/页面配置

职责：
1. 定义12种元素类型（按 type 字段判别的联合类型）
2. 定义分区与整体设计（页面尺寸、字体、颜色）
3. 持久化格式为 camelCase（别名），Python 侧使用 snake_case

测试要点：
- test_element_discriminator: 按type解析为对应元素模型
- test_design_roundtrip: 隐藏分区内的元素序列化后保留
- test_export_config_bounds: labelCount/startNumber 边界
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

Alignment = Literal["left", "center", "right"]
FontWeight = Literal["normal", "bold"]

CAMEL_CONFIG = {"alias_generator": to_camel, "populate_by_name": True}


class LabelSectionId(str, Enum):
    """分区ID"""
    IDENTITY = "identity"
    DPP = "dpp"
    COMPLIANCE = "compliance"
    SUSTAINABILITY = "sustainability"
    CUSTOM = "custom"
    FOOTER = "footer"


class LabelFieldKey(str, Enum):
    """字段键（field-value 元素可引用的数据字段）"""
    PRODUCT_NAME = "productName"
    GTIN = "gtin"
    BATCH_NUMBER = "batchNumber"
    SERIAL_NUMBER = "serialNumber"
    MANUFACTURER_NAME = "manufacturerName"
    MANUFACTURER_ADDRESS = "manufacturerAddress"
    MANUFACTURER_EMAIL = "manufacturerEmail"
    MANUFACTURER_PHONE = "manufacturerPhone"
    MANUFACTURER_VAT = "manufacturerVAT"
    MANUFACTURER_EORI = "manufacturerEORI"
    MANUFACTURER_WEBSITE = "manufacturerWebsite"
    MANUFACTURER_CONTACT = "manufacturerContact"
    MANUFACTURER_COUNTRY = "manufacturerCountry"
    IMPORTER_NAME = "importerName"
    IMPORTER_ADDRESS = "importerAddress"
    IMPORTER_EMAIL = "importerEmail"
    IMPORTER_PHONE = "importerPhone"
    IMPORTER_VAT = "importerVAT"
    IMPORTER_EORI = "importerEORI"
    IMPORTER_COUNTRY = "importerCountry"
    COUNTRY_OF_ORIGIN = "countryOfOrigin"
    CATEGORY = "category"
    GROSS_WEIGHT = "grossWeight"
    NET_WEIGHT = "netWeight"
    HS_CODE = "hsCode"
    QUANTITY = "quantity"
    EPREL_NUMBER = "eprelNumber"
    WEEE_NUMBER = "weeeNumber"
    MADE_IN = "madeIn"
    UNIQUE_PRODUCT_ID = "uniqueProductId"
    PRODUCTION_DATE = "productionDate"
    RECYCLED_CONTENT_PERCENTAGE = "recycledContentPercentage"
    DURABILITY_YEARS = "durabilityYears"
    REPAIRABILITY_SCORE = "repairabilityScore"
    DPP_REGISTRY_ID = "dppRegistryId"
    SAFETY_INFORMATION = "safetyInformation"


class PackageCounterFormat(str, Enum):
    """包裹计数格式"""
    X_SLASH_Y = "x-slash-y"
    X_OF_Y = "x-of-y"
    PACKAGE_X_OF_Y = "package-x-of-y"
    BOX_X_OF_Y = "box-x-of-y"
    PARCEL_X_OF_Y = "parcel-x-of-y"


# ============================================================================
# 元素
# ============================================================================

class LabelElementBase(BaseModel):
    """元素公共字段"""
    id: str
    section_id: LabelSectionId
    sort_order: float = 0

    model_config = CAMEL_CONFIG


class TextElement(LabelElementBase):
    """静态文本"""
    type: Literal["text"] = "text"
    content: str = ""
    font_size: float = 7
    font_weight: FontWeight = "normal"
    color: str = "#1a1a1a"
    alignment: Alignment = "left"
    italic: bool = False
    uppercase: bool = False


class FieldValueElement(LabelElementBase):
    """数据字段（值为空时整体跳过）"""
    type: Literal["field-value"] = "field-value"
    field_key: str = LabelFieldKey.PRODUCT_NAME.value
    show_label: bool = True
    label_text: str | None = None
    font_size: float = 7
    font_weight: FontWeight = "bold"
    color: str = "#1a1a1a"
    label_color: str = "#6b7280"
    alignment: Alignment = "left"
    layout: Literal["inline", "stacked"] = "inline"
    line_height: float = 1.2
    italic: bool = False
    uppercase: bool = False
    margin_bottom: float = 2
    font_family: str | None = None


class QRCodeElement(LabelElementBase):
    """DPP二维码"""
    type: Literal["qr-code"] = "qr-code"
    size: float = 52
    show_label: bool = True
    label_text: str = "Digital Product Passport"
    show_url: bool = True
    alignment: Alignment = "left"


class PictogramElement(LabelElementBase):
    """图形标识（内置库引用）"""
    type: Literal["pictogram"] = "pictogram"
    pictogram_id: str = "ce-mark"
    source: Literal["builtin", "database"] = "builtin"
    size: float = 24
    color: str = "#1a1a1a"
    show_label: bool = False
    label_text: str | None = None
    alignment: Alignment = "left"


class ComplianceBadgeElement(LabelElementBase):
    """合规徽章"""
    type: Literal["compliance-badge"] = "compliance-badge"
    badge_id: str = "ce"
    symbol: str = "CE"
    style: Literal["outlined", "filled", "minimal"] = "outlined"
    size: float = 7
    color: str = "#1a1a1a"
    background_color: str = "transparent"
    show_label: bool = False
    alignment: Alignment = "left"


class ImageElement(LabelElementBase):
    """图片（data URL）"""
    type: Literal["image"] = "image"
    src: str = ""
    alt: str = ""
    width: float = 50  # 占内容宽度百分比
    alignment: Alignment = "center"
    border_radius: float = 0


class DividerElement(LabelElementBase):
    """分隔线"""
    type: Literal["divider"] = "divider"
    color: str = "#d1d5db"
    thickness: float = 0.5
    style: Literal["solid", "dashed", "dotted"] = "solid"
    margin_top: float = 4
    margin_bottom: float = 4


class SpacerElement(LabelElementBase):
    """空白"""
    type: Literal["spacer"] = "spacer"
    height: float = 8


class MaterialCodeElement(LabelElementBase):
    """包装材料代码"""
    type: Literal["material-code"] = "material-code"
    codes: list[str] = Field(default_factory=list)
    auto_populate: bool = True
    font_size: float = 5.5
    color: str = "#1a1a1a"
    border_color: str = "#9ca3af"
    alignment: Alignment = "left"


class BarcodeElement(LabelElementBase):
    """条码"""
    type: Literal["barcode"] = "barcode"
    format: Literal["ean13", "code128", "code39"] = "ean13"
    value: str = ""
    auto_populate: bool = True
    height: float = 30
    show_text: bool = True
    alignment: Alignment = "center"


class IconTextElement(LabelElementBase):
    """图标+文本"""
    type: Literal["icon-text"] = "icon-text"
    icon: str = "Info"
    text: str = ""
    font_size: float = 6
    color: str = "#374151"
    icon_size: float = 8
    alignment: Alignment = "left"


class PackageCounterElement(LabelElementBase):
    """包裹计数（仅批量导出时渲染）"""
    type: Literal["package-counter"] = "package-counter"
    format: PackageCounterFormat = PackageCounterFormat.X_OF_Y
    font_size: float = 11
    font_weight: FontWeight = "bold"
    color: str = "#1a1a1a"
    background_color: str = "#f3f4f6"
    border_color: str = "#9ca3af"
    border_width: float = 1
    border_radius: float = 4
    padding: float = 6
    alignment: Alignment = "center"
    show_border: bool = True
    show_background: bool = True
    uppercase: bool = False
    font_family: str | None = None


LabelElement = Annotated[
    Union[
        TextElement,
        FieldValueElement,
        QRCodeElement,
        PictogramElement,
        ComplianceBadgeElement,
        ImageElement,
        DividerElement,
        SpacerElement,
        MaterialCodeElement,
        BarcodeElement,
        IconTextElement,
        PackageCounterElement,
    ],
    Field(discriminator="type"),
]

ELEMENT_TYPES: dict[str, type[LabelElementBase]] = {
    "text": TextElement,
    "field-value": FieldValueElement,
    "qr-code": QRCodeElement,
    "pictogram": PictogramElement,
    "compliance-badge": ComplianceBadgeElement,
    "image": ImageElement,
    "divider": DividerElement,
    "spacer": SpacerElement,
    "material-code": MaterialCodeElement,
    "barcode": BarcodeElement,
    "icon-text": IconTextElement,
    "package-counter": PackageCounterElement,
}


# ============================================================================
# 分区与设计
# ============================================================================

class LabelSection(BaseModel):
    """分区"""
    id: LabelSectionId
    label: str = ""
    visible: bool = True
    collapsed: bool = False
    sort_order: float = 0
    padding_top: float = 0
    padding_bottom: float = 6
    show_border: bool = False
    border_color: str = "#d1d5db"
    background_color: str | None = None

    model_config = CAMEL_CONFIG


class LabelDesign(BaseModel):
    """标签设计"""
    version: int = Field(default=2, alias="_version")
    page_size: Literal["A6", "A7", "custom"] = "A6"
    page_width: float = 297.64
    page_height: float = 419.53
    padding: float = 14
    background_color: str = "#ffffff"
    font_family: str = "Helvetica"
    base_font_size: float = 6.5
    base_text_color: str = "#1a1a1a"
    sections: list[LabelSection] = Field(default_factory=list)
    elements: list[LabelElement] = Field(default_factory=list)

    model_config = CAMEL_CONFIG

    def sorted_sections(self) -> list[LabelSection]:
        """按 sort_order 排序的分区（稳定排序）"""
        return sorted(self.sections, key=lambda s: s.sort_order)

    def elements_in(self, section_id: LabelSectionId | str) -> list[LabelElementBase]:
        """指定分区内按 sort_order 排序的元素"""
        sid = LabelSectionId(section_id)
        return sorted(
            (el for el in self.elements if el.section_id == sid),
            key=lambda el: el.sort_order,
        )

    def to_storage(self) -> dict:
        """导出为持久化格式（camelCase）"""
        return self.model_dump(mode="json", by_alias=True)


# ============================================================================
# 批量导出与内置图形
# ============================================================================

class MultiLabelExportConfig(BaseModel):
    """批量导出配置"""
    label_count: int = Field(default=1, ge=1, le=999)
    format: PackageCounterFormat = PackageCounterFormat.X_OF_Y
    start_number: int = Field(default=1, ge=1)
    filename_pattern: Literal["single", "batch"] = "batch"
    locale: str = ""  # 空串取 RenderConfig.default_locale

    model_config = CAMEL_CONFIG

    @property
    def end_number(self) -> int:
        """最后一份的序号（即计数的total）"""
        return self.start_number + self.label_count - 1


class BuiltinPictogram(BaseModel):
    """内置图形"""
    id: str
    name: str
    category: Literal["compliance", "recycling", "chemicals", "energy", "safety"]
    view_box: str
    svg_path: str
    mandatory: bool = False
    description: str = ""

    model_config = {"frozen": True}

    @property
    def aspect_ratio(self) -> float:
        """高宽比（由 viewBox 计算）"""
        _, _, w, h = (float(v) for v in self.view_box.split())
        return h / w if w else 1.0


class LabelTemplate(BaseModel):
    """内置模板"""
    id: str
    name: str
    description: str = ""
    category: str
    variant: Literal["b2b", "b2c", "universal"] = "universal"
    design: LabelDesign
    is_default: bool = True

    model_config = CAMEL_CONFIG
