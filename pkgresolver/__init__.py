"""pkgresolver - 模块化构建树的依赖包解析器"""

__version__ = "0.3.0"
