"""
异常定义

分类运行过程中使用的错误类型
"""


class ScanCategorizerError(Exception):
    """所有分类错误的基类"""


class ConfigurationError(ScanCategorizerError):
    """类别配置无效，运行前终止"""


class SourceResolutionError(ScanCategorizerError):
    """源目录无法解析，整个运行终止"""


class DocumentProcessingError(ScanCategorizerError):
    """单个文档处理失败，跳过该文档继续运行"""

    def __init__(self, message: str, document_name: str = ""):
        super().__init__(message)
        self.document_name = document_name
