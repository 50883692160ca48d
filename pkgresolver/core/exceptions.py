"""统一异常体系

所有业务异常继承 PkgResolverError，CLI 层据此输出友好提示并以非零码退出。

致命错误（中止整次运行）直接抛出；单个包引用层面的软错误由解析器
记录警告后跳过，不经过这里。
"""

from __future__ import annotations


class PkgResolverError(Exception):
    """解析器基础异常"""

    code: str = "UNKNOWN"

    # 为 True 的异常在"尽力而为"步骤中也必须继续向上传播
    must_propagate: bool = False

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ConfigError(PkgResolverError):
    """配置文件缺失或内容无效"""

    code = "CONFIG_ERROR"


class ValidationError(PkgResolverError):
    """输入数据校验失败"""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, details: list[str] | None = None) -> None:
        super().__init__(message)
        self.details = details or []


class DependencyError(PkgResolverError):
    """依赖包拉取或解压失败"""

    code = "DEPENDENCY_ERROR"


class PackageNotFoundError(DependencyError, LookupError):
    """包注册表中找不到指定 URI"""

    code = "PACKAGE_NOT_FOUND"


class TemplateError(PkgResolverError):
    """模板包使用方式错误（缺少项目名、目标目录非空等）"""

    code = "TEMPLATE_ERROR"


class ExecutionError(PkgResolverError):
    """外部命令或子模块子进程执行失败"""

    code = "EXECUTION_ERROR"


class SelfRelaunchSignal(PkgResolverError):
    """进程需要以新的可执行文件重新启动自身

    在复制可执行文件到二进制包等尽力而为步骤中，其他错误都会被吞掉，
    唯独这个信号必须原样向上抛出。
    """

    code = "SELF_RELAUNCH"
    must_propagate = True
