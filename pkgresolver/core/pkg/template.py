"""项目模板展开

模板包解压到临时目录后，逐个文件复制到目标目录:
  - 路径中的 {PROJECT_NAME} / {PROJECT_SAFE_NAME} 被替换
  - 内容含占位符的文件按文本替换后写出
  - 不含占位符的文件原样按字节复制，避免破坏图片等二进制资源
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Iterator
from pathlib import Path
from xml.sax.saxutils import escape

from pkgresolver.core.pkg.markers import GIT_MARKER, aggressive_delete

logger = logging.getLogger(__name__)

PROJECT_NAME = "{PROJECT_NAME}"
PROJECT_SAFE_NAME = "{PROJECT_SAFE_NAME}"
PROJECT_XML_NAME = "{PROJECT_XML_NAME}"
PROJECT_SAFE_XML_NAME = "{PROJECT_SAFE_XML_NAME}"

CONTENT_TOKENS = (
    PROJECT_NAME, PROJECT_XML_NAME, PROJECT_SAFE_NAME, PROJECT_SAFE_XML_NAME,
)

DEFAULT_SAFE_NAME = "Default"

_XML_ENTITIES = {'"': "&quot;", "'": "&apos;"}


def normalize_template_name(name: str) -> str:
    """生成可用作标识符的项目名

    保留 ASCII 字母；ASCII 数字仅在非首位时保留；其余字符全部丢弃。
    结果为空时使用 "Default"。

    >>> normalize_template_name("3DGame")
    'DGame'
    >>> normalize_template_name("My Game!")
    'MyGame'
    """
    kept = [
        ch for i, ch in enumerate(name)
        if ("a" <= ch <= "z") or ("A" <= ch <= "Z") or (i >= 1 and "0" <= ch <= "9")
    ]
    normalized = "".join(kept)
    if not normalized.strip():
        return DEFAULT_SAFE_NAME
    return normalized


def xml_escape(text: str) -> str:
    return escape(text, _XML_ENTITIES)


def iter_template_files(
    current: Path, prefix: Path = Path(),
) -> Iterator[tuple[Path, Path]]:
    """深度优先遍历，产出 (相对路径, 实际文件)，跳过 .git 子树

    子目录先于当前目录下的文件产出。
    """
    entries = sorted(current.iterdir(), key=lambda p: p.name)
    for d in entries:
        if d.is_dir() and d.name != GIT_MARKER:
            yield from iter_template_files(d, prefix / d.name)
    for f in entries:
        if f.is_file():
            yield prefix / f.name, f


class TemplateInstantiator:
    """把已解压的模板目录展开为新项目"""

    def __init__(self, staging_dir: Path) -> None:
        self.staging_dir = staging_dir

    def apply(self, source: Path, destination: Path, project_name: str) -> list[Path]:
        """展开模板，返回写出的文件列表；完成后删除临时目录"""
        safe_name = normalize_template_name(project_name)
        path_replacements = {
            PROJECT_NAME: project_name,
            PROJECT_SAFE_NAME: safe_name,
        }
        content_replacements = {
            PROJECT_NAME: project_name,
            PROJECT_XML_NAME: xml_escape(project_name),
            PROJECT_SAFE_NAME: safe_name,
            PROJECT_SAFE_XML_NAME: xml_escape(safe_name),
        }

        logger.info("展开模板 %s -> %s (项目名: %s)", source, destination, project_name)
        written: list[Path] = []
        for rel, src_file in iter_template_files(source):
            rel_text = rel.as_posix()
            for token, value in path_replacements.items():
                rel_text = rel_text.replace(token, value)
            target = destination / rel_text
            target.parent.mkdir(parents=True, exist_ok=True)

            data = src_file.read_bytes()
            if any(token.encode("utf-8") in data for token in CONTENT_TOKENS):
                text = data.decode("utf-8", errors="surrogateescape")
                for token, value in content_replacements.items():
                    text = text.replace(token, value)
                target.write_bytes(text.encode("utf-8", errors="surrogateescape"))
            else:
                shutil.copyfile(src_file, target)
            written.append(target)

        logger.info("模板展开完成，共 %d 个文件", len(written))
        aggressive_delete(self.staging_dir)
        return written
