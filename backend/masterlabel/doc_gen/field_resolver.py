"""
字段值解析 - 字段键 → 展示字符串

对任意键、任意快照（含全部可选字段缺失的快照）都返回字符串，从不抛异常。
预留键（快照中暂无数据来源）固定返回 ""。

测试要点：
- test_resolver_total: 所有 LabelFieldKey 都返回 str
- test_gross_weight_format: 1500 克 → "1.50 kg"
- test_unknown_key: 未知键返回 ""
"""

from __future__ import annotations

from typing import Callable

from ..models import LabelFieldKey, MasterLabelData

K = LabelFieldKey


def _gross_weight(data: MasterLabelData) -> str:
    if data.b2b_gross_weight is None:
        return ""
    return f"{data.b2b_gross_weight / 1000:.2f} kg"


def _quantity(data: MasterLabelData) -> str:
    return "" if data.b2b_quantity is None else str(data.b2b_quantity)


def _importer_name(data: MasterLabelData) -> str:
    return data.identity.importer.name if data.identity.importer else ""


def _importer_address(data: MasterLabelData) -> str:
    return data.identity.importer.address if data.identity.importer else ""


FIELD_RESOLVERS: dict[str, Callable[[MasterLabelData], str]] = {
    K.PRODUCT_NAME.value: lambda d: d.identity.product_name,
    K.GTIN.value: lambda d: d.identity.model_sku,
    K.BATCH_NUMBER.value: lambda d: d.identity.batch_number,
    # 序列号与批号同源
    K.SERIAL_NUMBER.value: lambda d: d.identity.batch_number,
    K.MANUFACTURER_NAME.value: lambda d: d.identity.manufacturer.name,
    K.MANUFACTURER_ADDRESS.value: lambda d: d.identity.manufacturer.address,
    K.IMPORTER_NAME.value: _importer_name,
    K.IMPORTER_ADDRESS.value: _importer_address,
    K.COUNTRY_OF_ORIGIN.value: lambda d: d.b2c_target_country or "",
    K.MADE_IN.value: lambda d: d.b2c_target_country or "",
    K.CATEGORY.value: lambda d: d.product_group.value,
    K.GROSS_WEIGHT.value: _gross_weight,
    K.QUANTITY.value: _quantity,
}


def resolve_field_value(field_key: LabelFieldKey | str, data: MasterLabelData) -> str:
    """解析字段值（未知键/预留键返回 ""）"""
    key = field_key.value if isinstance(field_key, LabelFieldKey) else str(field_key)
    resolver = FIELD_RESOLVERS.get(key)
    if resolver is None:
        return ""
    return resolver(data) or ""
