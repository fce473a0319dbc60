import sys
import unittest
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from modemppp.core.models import AuthType, Ipv4Policy, ModemConfig
from modemppp.core.secrets import SecretsEntry
from modemppp.modems.base import ChatScript, quote
from modemppp.modems.catalog import GeneratorKind
from modemppp.modems.huawei import HuaweiGenerator
from modemppp.modems.registry import create_generator
from modemppp.modems.sierra import SierraGenerator
from modemppp.modems.telit import TelitGenerator
from modemppp.modems.ublox import UbloxGenerator

LOG = Path("/var/log/kura-telit_le910_1-1.2")
CHAT = Path("/etc/ppp/scripts/chat_telit_le910_1-1.2")
DISCONNECT = Path("/etc/ppp/scripts/disconnect_telit_le910_1-1.2")

CHAP_CONFIG = ModemConfig(
    ppp_number=3,
    apn="internet",
    auth_type=AuthType.CHAP,
    username="u",
    password="p",
    lcp_echo_interval=5,
    lcp_echo_failure=4,
    persist=True,
)


class PeerFileTests(unittest.TestCase):
    def test_telit_peer_render(self) -> None:
        peer = TelitGenerator().build_peer("telit_le910", CHAP_CONFIG, LOG, CHAT, DISCONNECT)

        expected = "\n".join(
            [
                "# telit_le910",
                "115200",
                "logfile /var/log/kura-telit_le910_1-1.2",
                'connect "/usr/sbin/chat -v -f /etc/ppp/scripts/chat_telit_le910_1-1.2"',
                'disconnect "/usr/sbin/chat -v -f /etc/ppp/scripts/disconnect_telit_le910_1-1.2"',
                'user "u"',
                "require-chap",
                "refuse-pap",
                "debug",
                "modem",
                "lock",
                "crtscts",
                "noipdefault",
                "ipcp-accept-local",
                "ipcp-accept-remote",
                "defaultroute",
                "usepeerdns",
                "novj",
                "novjccomp",
                "nobsdcomp",
                "nodeflate",
                "lcp-echo-interval 5",
                "lcp-echo-failure 4",
                "persist",
                "holdoff 1",
                "maxfail 5",
            ]
        )
        self.assertEqual(expected + "\n", peer.render())

    def test_baud_rate_override_is_rendered(self) -> None:
        peer = TelitGenerator().build_peer("telit_le910", CHAP_CONFIG, LOG, CHAT, DISCONNECT)
        peer.baud_rate = 921600

        self.assertEqual("921600", peer.render().splitlines()[1])

    def test_no_auth(self) -> None:
        peer = TelitGenerator().build_peer("telit_le910", ModemConfig(), LOG, CHAT, DISCONNECT)
        lines = peer.render().splitlines()

        self.assertIn("noauth", lines)
        self.assertFalse([line for line in lines if line.startswith(("user", "require-", "refuse-"))])
        self.assertEqual({}, peer.secrets())

    def test_pap_auth(self) -> None:
        config = ModemConfig(auth_type=AuthType.PAP, username="u", password="p")
        peer = TelitGenerator().build_peer("telit_le910", config, LOG, CHAT, DISCONNECT)
        lines = peer.render().splitlines()

        self.assertIn("require-pap", lines)
        self.assertIn("refuse-chap", lines)
        self.assertNotIn("noauth", lines)
        self.assertEqual({AuthType.PAP: SecretsEntry("u", "*", "p", "*")}, peer.secrets())

    def test_either_auth_writes_both_secrets(self) -> None:
        config = ModemConfig(auth_type=AuthType.EITHER, username="u", password="p")
        peer = TelitGenerator().build_peer("telit_le910", config, LOG, CHAT, DISCONNECT)
        lines = peer.render().splitlines()

        self.assertIn('user "u"', lines)
        self.assertFalse([line for line in lines if line.startswith(("refuse-", "require-"))])
        self.assertEqual({AuthType.CHAP, AuthType.PAP}, set(peer.secrets()))

    def test_optional_directives(self) -> None:
        config = ModemConfig(
            idle=120,
            persist=False,
            max_fail=3,
            header_compression=True,
            data_compression=True,
            ipv4_policy=Ipv4Policy.LOCAL,
        )
        lines = SierraGenerator().build_peer("sierra_mc8790", config, LOG, CHAT, DISCONNECT).render().splitlines()

        self.assertIn("idle 120", lines)
        self.assertIn("maxfail 3", lines)
        self.assertNotIn("persist", lines)
        self.assertNotIn("noipdefault", lines)
        self.assertNotIn("novj", lines)
        self.assertNotIn("nodeflate", lines)
        self.assertFalse([line for line in lines if line.startswith("lcp-echo")])


class ChatScriptTests(unittest.TestCase):
    def test_quote_escapes_double_quotes(self) -> None:
        self.assertEqual('"AT+CGDCONT=1,\\"IP\\",\\"apn\\""', quote('AT+CGDCONT=1,"IP","apn"'))
        self.assertEqual('""', quote(""))

    def test_render_format(self) -> None:
        script = ChatScript().abort("BUSY").timeout(30).expect_send("", "AT").expect_send("OK", r"\c")

        self.assertEqual('ABORT\t"BUSY"\nTIMEOUT\t30\n""\t"AT"\n"OK"\t"\\c"\n', script.render())

    def test_telit_connect_script(self) -> None:
        script = TelitGenerator().build_connect(CHAP_CONFIG)

        expected = (
            'ABORT\t"BUSY"\n'
            'ABORT\t"VOICE"\n'
            'ABORT\t"NO CARRIER"\n'
            'ABORT\t"NO DIALTONE"\n'
            'ABORT\t"NO DIAL TONE"\n'
            'ABORT\t"ERROR"\n'
            "TIMEOUT\t45\n"
            '""\t"+++ath"\n'
            '""\t"AT"\n'
            '"OK"\t"AT+CSQ"\n'
            '"OK"\t"AT+CGDCONT=1,\\"IP\\",\\"internet\\""\n'
            '"OK"\t"\\d\\d\\d"\n'
            '""\t"atd*99***1#"\n'
            '"CONNECT"\t"\\c"\n'
        )
        self.assertEqual(expected, script.render())

    def test_custom_dial_string_and_init_strings(self) -> None:
        config = ModemConfig(apn="m2m", dial_string="ATD*99#", init_strings=("AT+CFUN=1", "AT+COPS=0"))
        lines = SierraGenerator().build_connect(config).render().splitlines()

        cgdcont = lines.index('"OK"\t"AT+CGDCONT=1,\\"IP\\",\\"m2m\\""')
        self.assertEqual('"OK"\t"AT+CFUN=1"', lines[cgdcont + 1])
        self.assertEqual('"OK"\t"AT+COPS=0"', lines[cgdcont + 2])
        self.assertEqual('"OK"\t"ATD*99#"', lines[cgdcont + 3])

    def test_profile_id_selects_pdp_context(self) -> None:
        config = ModemConfig(apn="iot", pdp_type="IPV4V6", profile_id=2)
        rendered = UbloxGenerator().build_connect(config).render()

        self.assertIn('AT+CGDCONT=2,\\"IPV4V6\\",\\"iot\\"', rendered)
        self.assertIn('"ATD*99***2#"', rendered)
        self.assertIn('"AT+CGACT=0,2"', UbloxGenerator().build_disconnect(config).render())

    def test_family_prologues_differ(self) -> None:
        config = ModemConfig(apn="internet")
        huawei = HuaweiGenerator().build_connect(config).render()
        sierra = SierraGenerator().build_connect(config).render()

        self.assertIn('"AT^SYSINFO"', huawei)
        self.assertIn('"ATDT*99#"', huawei)
        self.assertIn('"AT!GSTATUS?"', sierra)
        self.assertIn('REPORT\t"CONNECT"\n', sierra)
        self.assertIn('"AT+CSQ"', sierra)

    def test_default_disconnect_script(self) -> None:
        rendered = TelitGenerator().build_disconnect(CHAP_CONFIG).render()

        self.assertEqual(
            'ABORT\t"BUSY"\nABORT\t"ERROR"\nABORT\t"NO DIALTONE"\n""\t"BREAK\\c"\n""\t"+++ATH"\n"NO CARRIER"\t""\n',
            rendered,
        )

    def test_registry_builds_each_family(self) -> None:
        for kind in GeneratorKind:
            generator = create_generator(kind, baud_rate=460800, chat_program="/bin/chat")
            peer = generator.build_peer("x", ModemConfig(), LOG, CHAT, DISCONNECT)

            self.assertEqual(460800, peer.baud_rate)
            self.assertIn('connect "/bin/chat -v -f', peer.render())
            self.assertTrue(generator.build_connect(ModemConfig()).render().endswith("\n"))


if __name__ == "__main__":
    unittest.main()
