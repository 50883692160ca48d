"""YAML 文件统一读写工具

包注册表、提交缓存、模块文件、全局工具登记表都经由这里读写。
统一 encoding="utf-8"、空值保护、目录自动创建、原子写入。
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Callable

import yaml

logger = logging.getLogger(__name__)

# YAML 文件最大大小限制 (10MB)
MAX_YAML_SIZE = 10 * 1024 * 1024


def atomic_write(path: Path, content: str) -> None:
    """原子写入文件：先写临时文件再 rename，防止中途崩溃导致损坏"""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(
        dir=str(path.parent), suffix=".tmp",
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(tmp, str(path))
    except Exception:
        # 只捕获普通异常，不拦截 KeyboardInterrupt/SystemExit
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise


def load_yaml(path: str | Path) -> dict[str, Any]:
    """安全读取 YAML 文件

    返回:
        dict: 解析后的字典。文件不存在、为空、或内容不是字典类型时返回空字典

    异常:
        yaml.YAMLError: YAML 格式错误
        OSError: IO 错误
        ValueError: 文件过大（超过 MAX_YAML_SIZE）
    """
    p = Path(path)
    if not p.exists():
        return {}

    file_size = p.stat().st_size
    if file_size > MAX_YAML_SIZE:
        raise ValueError(
            f"YAML 文件过大: {p} ({file_size} 字节), "
            f"超过限制 {MAX_YAML_SIZE} 字节"
        )

    try:
        with open(p, encoding="utf-8") as f:
            result = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error("解析 YAML 文件失败: %s, 错误: %s", path, e)
        raise

    if result is None:
        return {}
    if not isinstance(result, dict):
        logger.warning(
            "%s 内容不是字典类型 (实际类型: %s)，返回空字典",
            path, type(result).__name__,
        )
        return {}
    return result


def save_yaml(path: str | Path, data: Any) -> None:
    """原子写入 YAML 文件，自动创建父目录，保持键顺序"""
    p = Path(path)
    try:
        content = yaml.dump(
            data, default_flow_style=False,
            allow_unicode=True, sort_keys=False,
        )
        atomic_write(p, content)
    except yaml.YAMLError as e:
        logger.error("序列化 YAML 数据失败: %s, 错误: %s", path, e)
        raise


def update_yaml(path: str | Path, mutate: Callable[[dict[str, Any]], None]) -> dict[str, Any]:
    """读取字典 → 原地修改 → 原子写回，返回修改后的内容

    提交缓存与全局工具登记表都按这种方式增量更新。
    """
    data = load_yaml(path)
    mutate(data)
    save_yaml(path, data)
    return data
