"""
Master Label 标签合成引擎 - 后端核心模块

模块结构：
- config/      运行期配置与规则表加载
- models/      数据模型定义（实体记录/标签快照/设计）
- assembly/    标签数据组装（归类/合规/可持续性/身份/DPP）
- doc_gen/     文档生成（字段解析/排版/PDF渲染/批量导出）
- validation/  设计与数据校验、合规清单
- pipeline/    导出流水线编排与打包
"""

__version__ = "0.1.0"
