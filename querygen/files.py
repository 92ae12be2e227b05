"""File-system collaborators rooted at an output directory."""

from __future__ import annotations

import asyncio
from pathlib import Path


class LocalFiles:
    def __init__(self, root: Path) -> None:
        self.root = root

    def exists_file(self, path: str) -> bool:
        return (self.root / path).exists()

    async def read_file(self, path: str) -> str:
        return await asyncio.to_thread((self.root / path).read_text, encoding="utf-8")

    async def write_file(self, path: str, content: str) -> None:
        target = self.root / path
        target.parent.mkdir(parents=True, exist_ok=True)
        await asyncio.to_thread(target.write_text, content, encoding="utf-8")
