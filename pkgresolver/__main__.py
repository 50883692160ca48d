"""支持 ``python -m pkgresolver``，子模块解析的子进程也经由此入口启动"""

from pkgresolver.cli import main

if __name__ == "__main__":
    main()
