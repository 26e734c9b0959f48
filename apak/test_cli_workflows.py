from __future__ import annotations

import os
import subprocess
import sys
import tempfile
import unittest
from pathlib import Path
from typing import Dict

from apak.archive import Archive


def _build_fixture_tree(root: Path) -> Dict[str, bytes]:
    files: Dict[str, bytes] = {}
    (root / "docs" / "notes").mkdir(parents=True)
    content = b"hello world\n" * 20
    (root / "docs" / "readme.txt").write_bytes(content)
    files["docs/readme.txt"] = content

    bin_data = os.urandom(2048)
    (root / "docs" / "notes" / "binary.bin").write_bytes(bin_data)
    files["docs/notes/binary.bin"] = bin_data

    (root / "docs" / "notes" / "empty.txt").write_bytes(b"")
    files["docs/notes/empty.txt"] = b""
    return files


class CLIIntegrationTests(unittest.TestCase):
    def run_cli(self, args, *, expect: int | None = 0, cwd: Path | None = None):
        cmd = [sys.executable, "-m", "apak.cli"] + list(args)
        env = os.environ.copy()
        repo_root = Path(__file__).resolve().parents[1]
        existing = env.get("PYTHONPATH", "")
        env["PYTHONPATH"] = str(repo_root) if not existing else f"{repo_root}{os.pathsep}{existing}"
        proc = subprocess.run(
            cmd,
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            env=env,
        )
        if expect is not None and proc.returncode != expect:
            raise AssertionError(
                f"CLI exited {proc.returncode}, expected {expect}\nCommand: {' '.join(cmd)}\nSTDOUT:\n{proc.stdout}\nSTDERR:\n{proc.stderr}"
            )
        return proc

    def test_pack_list_unpack_roundtrip(self):
        with tempfile.TemporaryDirectory() as src_tmp, tempfile.TemporaryDirectory() as work_tmp:
            src_root = Path(src_tmp)
            work = Path(work_tmp)
            files = _build_fixture_tree(src_root)
            archive = work / "tree.pak"

            self.run_cli(["pack", str(archive), str(src_root / "docs"), "--quiet"])
            self.assertTrue(archive.exists())

            pak = Archive.load(str(archive))
            self.assertEqual(sorted(files), sorted(c.path for c in pak))

            listing = self.run_cli(["list", str(archive)]).stdout.splitlines()
            self.assertEqual(len(files), len(listing))
            self.assertIn(f"{len(files['docs/readme.txt'])}\t1\tdocs/readme.txt", listing)
            self.assertIn("0\t0\tdocs/notes/empty.txt", listing)

            info = self.run_cli(["info", str(archive)]).stdout
            self.assertIn(f"Entries: {len(files)}", info)

            out = work / "out"
            self.run_cli(["unpack", str(archive), "--outdir", str(out)])
            for rel, data in files.items():
                self.assertEqual(data, (out / rel).read_bytes())

    def test_unpack_selected_paths_and_exists_policy(self):
        with tempfile.TemporaryDirectory() as src_tmp, tempfile.TemporaryDirectory() as work_tmp:
            src_root = Path(src_tmp)
            work = Path(work_tmp)
            _build_fixture_tree(src_root)
            archive = work / "tree.pak"
            self.run_cli(["pack", str(archive), str(src_root / "docs"), "--quiet"])

            out = work / "sel"
            self.run_cli(["unpack", str(archive), "--outdir", str(out), "docs/notes"])
            self.assertTrue((out / "docs" / "notes" / "binary.bin").exists())
            self.assertFalse((out / "docs" / "readme.txt").exists())

            proc = self.run_cli(["unpack", str(archive), "--outdir", str(out), "--exists", "fail", "docs/notes"], expect=2)
            self.assertIn("Destination exists", proc.stderr)

            (out / "docs" / "notes" / "binary.bin").write_bytes(b"keep")
            proc = self.run_cli(["unpack", str(archive), "--outdir", str(out), "--exists", "skip", "docs/notes"])
            self.assertIn("Done: 0 files", proc.stdout)
            self.assertEqual(b"keep", (out / "docs" / "notes" / "binary.bin").read_bytes())

    def test_corrupt_archive_reports_error(self):
        with tempfile.TemporaryDirectory() as tmp:
            work = Path(tmp)
            single = work / "one.txt"
            single.write_text("payload", encoding="utf-8")
            archive = work / "one.pak"
            self.run_cli(["pack", str(archive), str(single), "--quiet"])
            raw = bytearray(archive.read_bytes())
            raw[0] ^= 0xFF
            archive.write_bytes(bytes(raw))

            proc = self.run_cli(["list", str(archive)], expect=2)
            self.assertIn("invalid signature", proc.stderr)
            proc = self.run_cli(["unpack", str(archive), "--outdir", str(work / "out")], expect=2)
            self.assertIn("invalid signature", proc.stderr)

    def test_missing_input_fails(self):
        with tempfile.TemporaryDirectory() as tmp:
            proc = self.run_cli(["pack", str(Path(tmp) / "x.pak"), str(Path(tmp) / "nope")], expect=2)
            self.assertIn("Error:", proc.stderr)


if __name__ == "__main__":
    unittest.main()
