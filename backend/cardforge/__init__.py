"""
CardForge 卡牌设计工具 - 数据到产物流水线核心模块

模块结构：
- config/     运行期配置加载
- models/     数据模型定义（项目/蓝图/元素/数据表/导出）
- binding/    路径解析、占位符替换、文件名规则
- pipeline/   数量展开、命名去重、批量导出编排
- assets/     图片引用解析与素材复制
- storage/    路径工具、本地文件能力、项目文件读写
"""

__version__ = "0.1.0"
