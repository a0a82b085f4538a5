"""文件扫描与筛选逻辑。"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Iterator, Union

SUPPORTED_EXTENSIONS = ("png", "jpg", "jpeg", "bmp", "gif")
DIALOG_PATTERNS = tuple(f"*.{ext}" for ext in SUPPORTED_EXTENSIONS)


def is_supported(path: Union[str, Path]) -> bool:
    """扩展名（不区分大小写）为 png/jpg/jpeg/bmp/gif 时返回 True。

    扩展名取文件名最后一个 ``.`` 之后的部分；没有 ``.`` 或以 ``.`` 结尾均不支持。
    """

    _, dot, ext = Path(path).name.rpartition(".")
    if not dot or not ext:
        return False
    return ext.lower() in SUPPORTED_EXTENSIONS


def _iter_candidate_files(path: Path, recursive: bool) -> Iterator[Path]:
    """遍历路径下的所有文件。"""

    if path.is_file():
        yield path
        return

    if not path.is_dir():
        return

    iterator = path.rglob("*") if recursive else path.glob("*")
    for candidate in iterator:
        if candidate.is_file():
            yield candidate


def expand_sources(sources: Iterable[Union[str, Path]], recursive: bool = False) -> list[Path]:
    """将文件与目录混合的输入展开为受支持的图片文件列表。

    目录内的文件按路径不区分大小写排序；显式给出的文件保持原有顺序。
    """

    collected: list[Path] = []
    seen_paths: set[Path] = set()

    for raw in sources:
        root = Path(raw)
        if root.is_dir():
            candidates = sorted(
                (c for c in _iter_candidate_files(root, recursive) if is_supported(c)),
                key=lambda x: str(x).lower(),
            )
        else:
            candidates = [root]

        for candidate in candidates:
            if candidate in seen_paths:
                continue
            seen_paths.add(candidate)
            collected.append(candidate)

    return collected
