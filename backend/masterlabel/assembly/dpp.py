"""
DPP链接与二维码 - 数字产品护照入口

职责：
1. 按解析器格式拼接DPP链接（自定义基址 / GS1 Digital Link / 默认）
2. 生成二维码PNG并编码为 data URL（纠错H，边距1，宽200px）
3. 为组装参数补齐链接与二维码（流水线与命令行工具共用，失败降级为空二维码）

依赖：
- qrcode: 二维码矩阵生成
- Pillow: 缩放与PNG编码

测试要点：
- test_build_dpp_url_custom_base: 自定义基址
- test_build_dpp_url_gs1: GS1格式
- test_build_dpp_url_default: 默认格式
- test_qr_data_url_prefix: 输出为PNG data URL
- test_attach_dpp_qr_degrades: 二维码失败时返回空二维码并标记
"""

from __future__ import annotations

import base64
import logging
from io import BytesIO

import qrcode
from qrcode.exceptions import DataOverflowError
from PIL import Image

from ..config import get_config
from ..config.runtime_config import QRConfig
from ..interfaces import IQRCodeGenerator, QRGenerationError
from ..models import AssembleParams

logger = logging.getLogger(__name__)

ERROR_CORRECTION_LEVELS = {
    "L": qrcode.constants.ERROR_CORRECT_L,
    "M": qrcode.constants.ERROR_CORRECT_M,
    "Q": qrcode.constants.ERROR_CORRECT_Q,
    "H": qrcode.constants.ERROR_CORRECT_H,
}

DATA_URL_PREFIX = "data:image/png;base64,"


def build_dpp_url(
    gtin: str,
    serial_number: str,
    qr_settings: QRConfig | None = None,
    base_url: str | None = None,
) -> str:
    """拼接DPP链接"""
    settings = qr_settings or get_config().qr
    base = (base_url if base_url is not None else settings.base_url).rstrip("/")

    if settings.custom_base_url:
        return f"{settings.custom_base_url.rstrip('/')}/01/{gtin}/21/{serial_number}"

    if settings.resolver_format == "gs1":
        return f"{base}/01/{gtin}/21/{serial_number}"

    return f"{base}/p/{gtin}/{serial_number}"


class QRCodeGenerator(IQRCodeGenerator):
    """二维码生成器实现"""

    def __init__(self, settings: QRConfig | None = None):
        self.settings = settings or get_config().qr

    def to_data_url(self, url: str) -> str:
        """生成二维码 data URL"""
        if not url:
            raise QRGenerationError("DPP链接为空，无法生成二维码")

        level = ERROR_CORRECTION_LEVELS.get(self.settings.error_correction.upper())
        if level is None:
            raise QRGenerationError(f"不支持的纠错等级: {self.settings.error_correction}")

        try:
            qr = qrcode.QRCode(
                version=None,
                error_correction=level,
                box_size=10,
                border=self.settings.margin,
            )
            qr.add_data(url)
            qr.make(fit=True)
            img = qr.make_image(fill_color="black", back_color="white").convert("L")
            img = img.resize((self.settings.width, self.settings.width), Image.Resampling.NEAREST)

            buf = BytesIO()
            img.save(buf, format="PNG")
        except (ValueError, OSError, DataOverflowError) as e:
            raise QRGenerationError(f"二维码生成失败: {e}") from e

        logger.debug(f"二维码已生成: {url}")
        return DATA_URL_PREFIX + base64.b64encode(buf.getvalue()).decode("ascii")


def decode_data_url(data_url: str) -> bytes | None:
    """解析 data URL 为原始字节（非 base64 data URL 返回None）"""
    if not data_url or not data_url.startswith("data:"):
        return None
    header, _, payload = data_url.partition(",")
    if ";base64" not in header or not payload:
        return None
    try:
        return base64.b64decode(payload, validate=False)
    except ValueError:
        return None


def attach_dpp_qr(
    params: AssembleParams,
    serial_number: str = "",
    qr_generator: IQRCodeGenerator | None = None,
    qr_settings: QRConfig | None = None,
) -> tuple[AssembleParams, bool]:
    """
    补齐组装参数中的DPP链接与二维码

    已提供的 dpp_url / qr_data_url 原样保留；序列号缺省取批次序列号。

    Returns:
        (新参数, 二维码是否生成失败)；失败时 qr_data_url 为空串
    """
    settings = qr_settings or get_config().qr
    serial = serial_number or (params.batch.serial_number if params.batch else "")
    dpp_url = params.dpp_url or build_dpp_url(params.product.gtin, serial, qr_settings=settings)

    qr_failed = False
    qr_data_url = params.qr_data_url
    if not qr_data_url:
        generator = qr_generator or QRCodeGenerator(settings)
        try:
            qr_data_url = generator.to_data_url(dpp_url)
        except QRGenerationError as e:
            logger.warning(f"二维码生成失败，使用空二维码: {e}")
            qr_failed = True
            qr_data_url = ""

    return params.model_copy(update={"dpp_url": dpp_url, "qr_data_url": qr_data_url}), qr_failed
