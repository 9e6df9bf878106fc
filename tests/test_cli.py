import os
import shutil
import tempfile
import unittest

from click.testing import CliRunner

from ssl_cli.cli import main
from ssl_cli.config import Settings
from ssl_cli.orchestrator import Orchestrator
from fakes import FakeRunner, ScriptedPrompts


class TestCli(unittest.TestCase):
    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.settings = Settings(certs_dir=os.path.join(self.temp_dir, "certs"))
        self.cli = CliRunner()

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def invoke(self, args, runner=None, prompts=None):
        orchestrator = Orchestrator(self.settings, prompts or ScriptedPrompts(), runner=runner or FakeRunner())
        return self.cli.invoke(main, args, obj=orchestrator)

    def test_welcome(self):
        result = self.invoke([])
        self.assertEqual(result.exit_code, 0)
        self.assertIn("SSL CERTIFICATE MANAGER", result.output)

    def test_help_lists_commands(self):
        result = self.invoke(["--help"])
        self.assertEqual(result.exit_code, 0)
        for command in ["create-local-ca", "create-cert", "setup-nginx", "check-openssl"]:
            self.assertIn(command, result.output)

    def test_check_openssl(self):
        result = self.invoke(["check-openssl"], runner=FakeRunner(outputs={"openssl version": "OpenSSL 3.0.13"}))
        self.assertEqual(result.exit_code, 0)
        self.assertIn("OpenSSL 3.0.13", result.output)

    def test_check_openssl_missing(self):
        result = self.invoke(["check-openssl"], runner=FakeRunner(missing=["openssl"]))
        self.assertEqual(result.exit_code, 3)

    def test_create_cert_without_ca(self):
        result = self.invoke(["create-cert", "--domain", "mysite.test"])
        self.assertEqual(result.exit_code, 5)
        self.assertIn("create-local-ca", result.output)

    def test_create_local_ca_then_cert(self):
        runner = FakeRunner()
        self.assertEqual(self.invoke(["create-local-ca"], runner=runner).exit_code, 0)

        result = self.invoke(["create-cert", "-d", "mysite.test"], runner=runner,
                             prompts=ScriptedPrompts(confirms=[True]))
        self.assertEqual(result.exit_code, 0)
        self.assertIn("mysite.test.crt", result.output)

    def test_declined_overwrite_exits_zero(self):
        runner = FakeRunner()
        self.invoke(["create-local-ca"], runner=runner)
        result = self.invoke(["create-local-ca"], runner=runner, prompts=ScriptedPrompts(confirms=[False]))
        self.assertEqual(result.exit_code, 0)
        self.assertIn("Using existing CA files", result.output)

    def test_subprocess_failure_exit_code(self):
        result = self.invoke(["create-local-ca"], runner=FakeRunner(fail_on={"genrsa": "bad passphrase"}))
        self.assertEqual(result.exit_code, 6)
        self.assertIn("bad passphrase", result.output)
