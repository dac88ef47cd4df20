import asyncio
import os
import shutil
import stat
import tempfile
import unittest
from pathlib import Path

from ttywaifu.config import SlideshowConfig
from ttywaifu.errors import ErrorKind, Failure
from ttywaifu.renderer import build_renderer_args, render, temporary_image

FAKE_RENDERER = """#!/bin/sh
for last; do :; done
echo "$last" > "{path_log}"
cp "$last" "{copy}"
{extra}
"""


@unittest.skipIf(os.name == "nt", "fake renderer is a POSIX shell script")
class TestRender(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.work_dir = Path(tempfile.mkdtemp(prefix="ttywaifu-test-"))
        self.path_log = self.work_dir / "rendered_path.txt"
        self.copy = self.work_dir / "rendered_copy.bin"

    def tearDown(self):
        shutil.rmtree(self.work_dir)

    def write_renderer(self, extra: str) -> Path:
        script = self.work_dir / "fake-jp2a"
        script.write_text(FAKE_RENDERER.format(path_log=self.path_log, copy=self.copy, extra=extra))
        script.chmod(script.stat().st_mode | stat.S_IXUSR)
        return script

    def rendered_path(self) -> Path:
        return Path(self.path_log.read_text().strip())

    async def test_successful_render_removes_temp_file(self):
        config = SlideshowConfig(renderer=str(self.write_renderer("exit 0")))
        result = await render(b"jpeg bytes", config)
        self.assertIsNone(result)
        self.assertEqual(self.copy.read_bytes(), b"jpeg bytes")
        self.assertFalse(self.rendered_path().exists())

    async def test_nonzero_exit_carries_stderr_and_cleans_up(self):
        config = SlideshowConfig(renderer=str(self.write_renderer('echo "bad format" >&2\nexit 2')))
        result = await render(b"not really an image", config)
        self.assertIsInstance(result, Failure)
        self.assertEqual(result.kind, ErrorKind.RENDERER_EXIT_NONZERO)
        self.assertEqual(result.status, 2)
        self.assertIn("bad format", result.message)
        self.assertFalse(self.rendered_path().exists())

    async def test_unexecutable_renderer(self):
        script = self.work_dir / "garbage-jp2a"
        script.write_bytes(b"\x00\x01\x02 not a program")
        script.chmod(script.stat().st_mode | stat.S_IXUSR)
        result = await render(b"bytes", SlideshowConfig(renderer=str(script)))
        self.assertIsInstance(result, Failure)
        self.assertEqual(result.kind, ErrorKind.RENDERER_MISSING)
        self.assertIn("Cannot execute", result.message)

    async def test_cancelled_render_kills_renderer(self):
        pid_file = self.work_dir / "renderer.pid"
        config = SlideshowConfig(renderer=str(self.write_renderer(f'echo $$ > "{pid_file}"\nexec sleep 30')))
        task = asyncio.create_task(render(b"bytes", config))
        for _ in range(100):
            if pid_file.exists() and pid_file.read_text().strip():
                break
            await asyncio.sleep(0.05)
        pid = int(pid_file.read_text().strip())

        task.cancel()
        with self.assertRaises(asyncio.CancelledError):
            await task
        with self.assertRaises(ProcessLookupError):
            os.kill(pid, 0)
        self.assertFalse(self.rendered_path().exists())

    async def test_missing_renderer(self):
        config = SlideshowConfig(renderer=str(self.work_dir / "no-such-jp2a"))
        result = await render(b"bytes", config)
        self.assertIsInstance(result, Failure)
        self.assertEqual(result.kind, ErrorKind.RENDERER_MISSING)


class TestRendererHelpers(unittest.TestCase):

    def test_flags(self):
        path = Path("/tmp/waifu-abc.jpg")
        self.assertEqual(build_renderer_args(SlideshowConfig(), path), ["-c", "-b", str(path)])
        self.assertEqual(
            build_renderer_args(SlideshowConfig(colors=True, fill=True), path),
            ["-c", "-b", "--colors", "--fill", str(path)],
        )

    def test_temporary_image_removed_after_error(self):
        with self.assertRaises(RuntimeError):
            with temporary_image(b"data") as path:
                self.assertEqual(path.read_bytes(), b"data")
                self.assertTrue(path.name.startswith("waifu-"))
                raise RuntimeError("renderer blew up")
        self.assertFalse(path.exists())

    def test_temporary_image_tolerates_early_removal(self):
        with temporary_image(b"data") as path:
            path.unlink()
        self.assertFalse(path.exists())


if __name__ == '__main__':
    unittest.main()
