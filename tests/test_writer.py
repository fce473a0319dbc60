import errno
import os
import stat
import sys
import unittest
from pathlib import Path
from tempfile import TemporaryDirectory
from unittest import mock

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from modemppp.core import paths
from modemppp.core.config import PppLayout
from modemppp.core.models import AuthType, ModemConfig
from modemppp.modems.telit import TelitGenerator
from modemppp.ppp.writer import ArtifactWriteError, ArtifactWriter, LinkUpdateError

BASE = "telit_le910_1-1.2"


class ArtifactWriterTests(unittest.TestCase):
    def _write(self, layout: PppLayout, config: ModemConfig, link: bool = True) -> bool:
        layout.peers_dir.mkdir(parents=True, exist_ok=True)
        layout.scripts_dir.mkdir(parents=True, exist_ok=True)
        generator = TelitGenerator()
        peer = generator.build_peer(
            "telit_le910",
            config,
            paths.log_path(BASE, layout),
            paths.chat_path(BASE, layout),
            paths.disconnect_path(BASE, layout),
        )
        return ArtifactWriter().write_all(
            peer,
            generator.build_connect(config),
            generator.build_disconnect(config),
            paths.peer_path(BASE, layout),
            paths.chat_path(BASE, layout),
            paths.disconnect_path(BASE, layout),
            paths.chap_secrets_path(layout),
            paths.pap_secrets_path(layout),
            link_path=paths.peer_link_path(0, layout) if link else None,
        )

    def test_writes_files_with_expected_modes(self) -> None:
        with TemporaryDirectory() as tmpdir:
            layout = PppLayout.under(tmpdir)
            config = ModemConfig(ppp_number=0, apn="internet", auth_type=AuthType.PAP, username="u", password="p")

            self.assertTrue(self._write(layout, config))

            modes = {
                paths.peer_path(BASE, layout): 0o644,
                paths.chat_path(BASE, layout): 0o755,
                paths.disconnect_path(BASE, layout): 0o755,
                paths.pap_secrets_path(layout): 0o600,
            }
            for path, mode in modes.items():
                self.assertEqual(mode, stat.S_IMODE(path.stat().st_mode), path)
            self.assertFalse(paths.chap_secrets_path(layout).exists())
            self.assertEqual("u * p *\n", paths.pap_secrets_path(layout).read_text(encoding="utf-8"))
            self.assertTrue(paths.peer_path(BASE, layout).read_text(encoding="utf-8").endswith("\n"))

    def test_unencodable_value_is_reported_as_write_error(self) -> None:
        with TemporaryDirectory() as tmpdir:
            layout = PppLayout.under(tmpdir)
            config = ModemConfig(ppp_number=0, apn="bad\ud800apn")

            with self.assertRaises(ArtifactWriteError) as ctx:
                self._write(layout, config)

            self.assertEqual(paths.chat_path(BASE, layout), ctx.exception.path)
            self.assertIsInstance(ctx.exception.reason, UnicodeEncodeError)
            self.assertEqual([], os.listdir(layout.peers_dir))
            self.assertEqual([], os.listdir(layout.scripts_dir))

    def test_no_link_requested(self) -> None:
        with TemporaryDirectory() as tmpdir:
            layout = PppLayout.under(tmpdir)

            self.assertFalse(self._write(layout, ModemConfig(), link=False))
            self.assertEqual([BASE], sorted(os.listdir(layout.peers_dir)))

    def test_secret_failure_keeps_previous_artifacts(self) -> None:
        with TemporaryDirectory() as tmpdir:
            layout = PppLayout.under(tmpdir)
            self._write(layout, ModemConfig(apn="old"))
            peer_before = paths.peer_path(BASE, layout).read_bytes()
            chat_before = paths.chat_path(BASE, layout).read_bytes()
            chap = paths.chap_secrets_path(layout)
            real_replace = os.replace

            def failing_replace(src, dst, *args, **kwargs):
                if Path(dst) == chap:
                    raise OSError(errno.EACCES, "Permission denied")
                return real_replace(src, dst, *args, **kwargs)

            config = ModemConfig(apn="new", auth_type=AuthType.CHAP, username="u", password="p")
            with mock.patch("modemppp.core.storage.os.replace", side_effect=failing_replace):
                with self.assertRaises(ArtifactWriteError) as ctx:
                    self._write(layout, config)

            self.assertEqual(chap, ctx.exception.path)
            self.assertEqual(peer_before, paths.peer_path(BASE, layout).read_bytes())
            self.assertEqual(chat_before, paths.chat_path(BASE, layout).read_bytes())
            self.assertFalse(chap.exists())
            leftovers = [name for name in os.listdir(layout.scripts_dir) if ".tmp." in name or ".bak." in name]
            self.assertEqual([], leftovers)

    def test_link_failure_is_reported_separately(self) -> None:
        with TemporaryDirectory() as tmpdir:
            layout = PppLayout.under(tmpdir)
            blocker = paths.peer_link_path(0, layout)
            blocker.mkdir(parents=True)

            with self.assertRaises(LinkUpdateError):
                self._write(layout, ModemConfig(ppp_number=0))

            self.assertTrue(paths.peer_path(BASE, layout).is_file())


if __name__ == "__main__":
    unittest.main()
