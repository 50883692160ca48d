"""依赖包解析模块

拆分说明:
- markers.py:    磁盘标记文件与目录操作
- template.py:   模板展开与项目名规范化
- strategies.py: 五种解析策略及分派表
- resolver.py:   单个包引用的状态机 + 模块树递归
- lookup.py / cache.py / locator.py / redirector.py / tools.py / execution.py:
  外部协作者的默认实现
"""

from pkgresolver.core.pkg.cache import LocalPackageCache
from pkgresolver.core.pkg.execution import ModuleExecution
from pkgresolver.core.pkg.locator import AncestorPackageLocator
from pkgresolver.core.pkg.lookup import YamlPackageLookup
from pkgresolver.core.pkg.redirector import UriRedirector
from pkgresolver.core.pkg.resolver import PackageResolver
from pkgresolver.core.pkg.template import TemplateInstantiator, normalize_template_name
from pkgresolver.core.pkg.tools import GlobalToolManager

__all__ = [
    "AncestorPackageLocator",
    "GlobalToolManager",
    "LocalPackageCache",
    "ModuleExecution",
    "PackageResolver",
    "TemplateInstantiator",
    "UriRedirector",
    "YamlPackageLookup",
    "normalize_template_name",
]
