"""项目内使用的自定义异常定义。"""


class ImageResizerError(Exception):
    """基础异常类型。"""


class InvalidConfigurationError(ImageResizerError):
    """配置不合法时抛出，属于致命错误，在任务分发前终止运行。"""


class ResolutionError(ImageResizerError):
    """内存预算无法容纳任何有效尺寸时抛出。"""
