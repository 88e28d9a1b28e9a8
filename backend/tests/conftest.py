"""
pytest 配置与公共 fixtures

使用方式：
    def test_something(rules, label_data):
        assert label_data.product_group == ProductGroup.ELECTRONICS
"""

from __future__ import annotations

import tempfile
import uuid
from pathlib import Path
from typing import Generator

import pytest

from masterlabel.assembly import LabelDataAssembler, QRCodeGenerator
from masterlabel.config import QRConfig, RuleSpec, RuntimeConfig, load_rules
from masterlabel.doc_gen import get_default_design_for_group
from masterlabel.models import (
    AssembleParams,
    BatchRecord,
    Certification,
    ExportJob,
    ExportRequest,
    LabelDesign,
    LabelVariant,
    MasterLabelData,
    Material,
    ProductRecord,
    Recyclability,
    Supplier,
)


# ============================================================================
# 配置 Fixtures
# ============================================================================

@pytest.fixture(scope="session")
def rules() -> RuleSpec:
    """加载规则表（会话级别缓存）"""
    return load_rules()


@pytest.fixture
def runtime_config(temp_dir: Path) -> RuntimeConfig:
    """运行期配置（存储目录指向临时目录）"""
    return RuntimeConfig(storage_dir=temp_dir / "storage")


@pytest.fixture(scope="session")
def qr_data_url() -> str:
    """真实二维码 data URL"""
    return QRCodeGenerator(QRConfig()).to_data_url("https://dpp.example.eu/p/4006381333931/SN-0001")


# ============================================================================
# 实体记录 Fixtures
# ============================================================================

@pytest.fixture
def sample_product() -> ProductRecord:
    """示例电子产品"""
    return ProductRecord(
        name="Smart Speaker X1",
        gtin="4006381333931",
        batch_number="P-BATCH-0",
        category="Consumer Electronics",
        manufacturer="Shenzhen Audio Co.",
        manufacturer_address="Free text address",
        materials=[
            Material(name="ABS Plastic", percentage=60, type="product"),
            Material(name="Cardboard box", percentage=30, recyclable=True, type="packaging"),
            Material(name="LDPE film", percentage=5, recyclable=True, type="packaging"),
            Material(name="Paper manual", percentage=5, recyclable=True, type="packaging"),
        ],
        certifications=[
            Certification(name="CE Declaration of Conformity"),
            Certification(name="RoHS 2011/65/EU"),
        ],
        recyclability=Recyclability(
            recyclable_percentage=80,
            instructions="Dispose of at an electronics collection point.",
        ),
        registrations={"weeeRegistration": "DE 12345678"},
        gross_weight=1200,
    )


@pytest.fixture
def sample_batch() -> BatchRecord:
    """示例批次"""
    return BatchRecord(
        batch_number="LOT-2024-001",
        serial_number="SN-0001",
        quantity=24,
        gross_weight=1500,
    )


@pytest.fixture
def manufacturer_supplier() -> Supplier:
    """示例制造商（EU境外）"""
    return Supplier(
        id="sup-m",
        name="Shenzhen Audio Co., Ltd.",
        address="88 Keji Road",
        postal_code="518057",
        city="Shenzhen",
        country="CN",
    )


@pytest.fixture
def importer_supplier() -> Supplier:
    """示例进口商（EU境内）"""
    return Supplier(
        id="sup-i",
        name="EuroImport GmbH",
        address="Hafenstrasse 1",
        address_line2="Gebäude B",
        postal_code="20457",
        city="Hamburg",
        country="DE",
    )


@pytest.fixture
def assemble_params(
    sample_product: ProductRecord,
    sample_batch: BatchRecord,
    manufacturer_supplier: Supplier,
    importer_supplier: Supplier,
    qr_data_url: str,
) -> AssembleParams:
    """完整组装参数（B2B）"""
    return AssembleParams(
        product=sample_product,
        batch=sample_batch,
        manufacturer_supplier=manufacturer_supplier,
        importer_supplier=importer_supplier,
        variant=LabelVariant.B2B,
        dpp_url="https://dpp.example.eu/p/4006381333931/SN-0001",
        qr_data_url=qr_data_url,
    )


# ============================================================================
# 快照与设计 Fixtures
# ============================================================================

@pytest.fixture
def label_data(rules: RuleSpec, assemble_params: AssembleParams) -> MasterLabelData:
    """组装后的标签数据快照"""
    return LabelDataAssembler(rules).assemble(assemble_params)


@pytest.fixture
def design() -> LabelDesign:
    """电子类内置模板设计（深拷贝，可修改）"""
    return get_default_design_for_group("electronics")


# ============================================================================
# 任务 Fixtures
# ============================================================================

@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """临时目录"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_job(temp_dir: Path, assemble_params: AssembleParams, design: LabelDesign) -> ExportJob:
    """临时导出任务（工作目录位于临时目录）"""
    job_id = str(uuid.uuid4())
    work_dir = temp_dir / "jobs" / job_id
    work_dir.mkdir(parents=True)
    return ExportJob(
        job_id=job_id,
        request=ExportRequest(params=assemble_params, design=design, serial_number="SN-0001"),
        work_dir=work_dir,
    )
