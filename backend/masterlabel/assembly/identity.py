"""
身份信息构建 - 产品名/SKU/批号/制造商/进口商

覆盖链：供应商结构化记录 > 产品自由文本 > ""
批号：批次 > 产品 > ""
进口商仅在关联了进口商供应商时出现（否则为None，而非空块）
"""

from __future__ import annotations

from ..models import BatchRecord, IdentitySection, PartyBlock, ProductRecord, Supplier


def format_supplier_address(supplier: Supplier) -> str:
    """格式化供应商地址：街道, 地址第二行, "邮编 城市", 国家"""
    parts = []
    if supplier.address:
        parts.append(supplier.address)
    if supplier.address_line2:
        parts.append(supplier.address_line2)

    city_line = " ".join(p for p in (supplier.postal_code, supplier.city) if p)
    if city_line:
        parts.append(city_line)

    if supplier.country:
        parts.append(supplier.country)

    return ", ".join(parts)


class IdentitySectionBuilder:
    """身份信息构建器"""

    def build(
        self,
        product: ProductRecord,
        batch: BatchRecord | None = None,
        manufacturer_supplier: Supplier | None = None,
        importer_supplier: Supplier | None = None,
    ) -> IdentitySection:
        """构建身份信息"""
        if manufacturer_supplier is not None:
            manufacturer = PartyBlock(
                name=manufacturer_supplier.name or product.manufacturer or "",
                address=format_supplier_address(manufacturer_supplier),
                country=manufacturer_supplier.country or "",
            )
        else:
            manufacturer = PartyBlock(
                name=product.manufacturer or "",
                address=product.manufacturer_address or "",
            )

        importer = None
        if importer_supplier is not None:
            importer = PartyBlock(
                name=importer_supplier.name or "",
                address=format_supplier_address(importer_supplier),
                country=importer_supplier.country or "",
            )

        batch_number = (batch.batch_number if batch else None) or product.batch_number or ""

        return IdentitySection(
            product_name=product.name or "",
            model_sku=product.gtin or "",
            batch_number=batch_number,
            manufacturer=manufacturer,
            importer=importer,
        )
