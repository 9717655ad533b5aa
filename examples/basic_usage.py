import asyncio
import os
import sys
import tempfile
from pathlib import Path

# Ensure the repo root is on sys.path when running as a script.
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import livefile


def blocking_demo(workdir: str) -> None:
    path = os.path.join(workdir, "settings.json")
    with open(path, "w", encoding="utf-8") as f:
        f.write('{"theme": "dark"}')

    # Extension omitted: falls back to settings.json
    settings = livefile.read_sync(os.path.join(workdir, "settings"), {"flush_interval_ms": 0, "indent": 2})
    settings["font_size"] = 14
    del settings["theme"]
    print("blocking store:", settings.path)
    print(Path(settings.path).read_text(encoding="utf-8"))


async def async_demo(workdir: str) -> None:
    path = os.path.join(workdir, "cache.yaml.gz")
    with open(path, "wb") as f:
        f.write(livefile.CompressionCodec(livefile.YAML).encode({}, livefile.StoreOptions()))

    cache = await livefile.read(path, {"flush_interval_ms": 200})
    for i in range(5):
        cache[f"key{i}"] = i
    print("dirty before tick:", cache.dirty)
    await asyncio.sleep(0.5)
    print("dirty after tick:", cache.dirty)

    cache["late"] = True  # written by the shutdown flush


def main() -> None:
    workdir = tempfile.mkdtemp(prefix="livefile-demo-")
    blocking_demo(workdir)
    asyncio.run(async_demo(workdir))
    print("files in", workdir, "->", sorted(os.listdir(workdir)))


if __name__ == "__main__":
    main()
