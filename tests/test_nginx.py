import os
import shutil
import tempfile
import unittest

from ssl_cli.nginx import NginxManager
from ssl_cli.models import HostProfile, PackageManager
from ssl_cli.response import ErrorKind
from fakes import FakeRunner, ScriptedPrompts

NGINX_T_FAILURE = (
    'nginx: [emerg] unknown directive "proxy_pas" in /etc/nginx/sites-enabled/app.example.com.conf:6\n'
    "nginx: configuration file /etc/nginx/nginx.conf test failed"
)


class NginxTestCase(unittest.TestCase):
    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.available = os.path.join(self.temp_dir, "sites-available")
        self.enabled = os.path.join(self.temp_dir, "sites-enabled")
        os.makedirs(self.available)
        os.makedirs(self.enabled)
        self.profile = HostProfile(platform="linux", privileged=True, package_manager=PackageManager.APT)

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def manager(self, runner):
        return NginxManager(sites_available=self.available, sites_enabled=self.enabled, runner=runner)


class TestConfigureProxy(NginxTestCase):
    def test_configure_proxy(self):
        runner = FakeRunner()
        result = self.manager(runner).configure_proxy("app.example.com", 7000, self.profile)

        self.assertTrue(result.success)
        self.assertTrue(result.data["reloaded"])
        self.assertEqual(result.data["upstream"], "http://127.0.0.1:7000")

        site_path = os.path.join(self.available, "app.example.com.conf")
        link_path = os.path.join(self.enabled, "app.example.com.conf")
        tee = runner.matching("tee")
        self.assertEqual(len(tee), 1)
        self.assertEqual(tee[0].argv, ["sudo", "tee", site_path])
        self.assertIn("proxy_pass http://127.0.0.1:7000;", tee[0].input)
        self.assertEqual(runner.rendered()[1:], [
            f"sudo ln -s {site_path} {link_path}",
            "sudo nginx -t",
            "sudo systemctl reload nginx",
        ])
        self.assertEqual(len(runner.matching("reload")), 1)

    def test_existing_link_is_replaced(self):
        link_path = os.path.join(self.enabled, "app.example.com.conf")
        os.symlink("/nonexistent/target.conf", link_path)
        runner = FakeRunner()

        self.manager(runner).configure_proxy("app.example.com", 7000, self.profile)

        rendered = runner.rendered()
        self.assertEqual(rendered[1], f"sudo rm -f {link_path}")
        self.assertTrue(rendered[2].startswith("sudo ln -s"))

    def test_validation_failure_never_reloads(self):
        runner = FakeRunner(fail_on={"nginx -t": NGINX_T_FAILURE})

        result = self.manager(runner).configure_proxy("app.example.com", 7000, self.profile)

        self.assertFalse(result.success)
        self.assertEqual(result.kind, ErrorKind.VALIDATION_FAILURE)
        self.assertEqual(result.stage, "validate configuration")
        self.assertEqual(result.error, NGINX_T_FAILURE)
        self.assertEqual(runner.matching("reload"), [])

    def test_reload_failure_is_warning(self):
        runner = FakeRunner(fail_on={"systemctl reload": "System has not been booted with systemd"})

        result = self.manager(runner).configure_proxy("app.example.com", 7000, self.profile)

        self.assertTrue(result.success)
        self.assertFalse(result.data["reloaded"])
        self.assertIn("sudo systemctl reload nginx", "\n".join(result.warnings))

    def test_write_failure_aborts(self):
        runner = FakeRunner(fail_on={"tee": "tee: Permission denied"})
        result = self.manager(runner).configure_proxy("app.example.com", 7000, self.profile)
        self.assertFalse(result.success)
        self.assertEqual(result.stage, "write site configuration")
        self.assertEqual(len(runner.calls), 1)

    def test_invalid_input(self):
        runner = FakeRunner()
        for domain, port in [("", 7000), ("app.example.com", 0), ("app.example.com", "seven")]:
            result = self.manager(runner).configure_proxy(domain, port, self.profile)
            self.assertEqual(result.kind, ErrorKind.VALIDATION_FAILURE)
        self.assertEqual(runner.calls, [])


class TestProvisioning(NginxTestCase):
    def test_unsupported_platform(self):
        runner = FakeRunner()
        result = self.manager(runner).ensure_proxy_and_issuance_client(
            HostProfile(platform="darwin"), ScriptedPrompts())
        self.assertEqual(result.kind, ErrorKind.PRECONDITION_UNMET)
        self.assertIn("Ubuntu/Debian", result.error)
        self.assertEqual(runner.calls, [])

    def test_missing_privileges(self):
        runner = FakeRunner()
        result = self.manager(runner).ensure_proxy_and_issuance_client(
            HostProfile(platform="linux", privileged=False), ScriptedPrompts())
        self.assertEqual(result.kind, ErrorKind.PERMISSION_DENIED)
        self.assertIn("sudo ssl-cli setup-nginx", result.error)
        self.assertEqual(runner.calls, [])

    def test_tools_already_installed(self):
        runner = FakeRunner()
        prompts = ScriptedPrompts()
        result = self.manager(runner).ensure_proxy_and_issuance_client(self.profile, prompts)

        self.assertTrue(result.success)
        self.assertEqual(result.data["installed"], [])
        self.assertEqual(prompts.confirmations, [])
        self.assertEqual(runner.rendered(), ["nginx -v", "certbot --version"])

    def test_install_nginx_with_consent(self):
        runner = FakeRunner(missing=["nginx"])
        result = self.manager(runner).ensure_proxy_and_issuance_client(
            self.profile, ScriptedPrompts(confirms=[True]))

        self.assertTrue(result.success)
        self.assertEqual(result.data["installed"], ["Nginx"])
        self.assertEqual(runner.rendered()[1:3], ["sudo apt-get update", "sudo apt-get install -y nginx"])
        self.assertEqual(len(runner.matching("systemctl reload nginx")), 1)
        self.assertEqual(result.warnings, [])

    def test_install_certbot_with_yum(self):
        runner = FakeRunner(missing=["certbot"])
        profile = HostProfile(platform="linux", privileged=True, package_manager=PackageManager.YUM)
        result = self.manager(runner).ensure_proxy_and_issuance_client(profile, ScriptedPrompts(confirms=[True]))

        self.assertTrue(result.success)
        self.assertEqual(runner.rendered()[2:], [
            "sudo yum makecache",
            "sudo yum install -y certbot python3-certbot-nginx",
        ])
        self.assertEqual(runner.matching("reload"), [])

    def test_declined_install_is_cancellation(self):
        runner = FakeRunner(missing=["nginx"])
        result = self.manager(runner).ensure_proxy_and_issuance_client(
            self.profile, ScriptedPrompts(confirms=[False]))

        self.assertTrue(result.success)
        self.assertTrue(result.cancelled)
        self.assertEqual(runner.rendered(), ["nginx -v"])

    def test_install_failure_aborts(self):
        runner = FakeRunner(missing=["nginx"], fail_on={"install -y nginx": "E: Unable to locate package nginx"})
        result = self.manager(runner).ensure_proxy_and_issuance_client(
            self.profile, ScriptedPrompts(confirms=[True]))

        self.assertFalse(result.success)
        self.assertEqual(result.stage, "install Nginx")
        self.assertIn("Unable to locate package nginx", result.error)
        self.assertEqual(runner.matching("certbot"), [])

    def test_no_package_manager(self):
        runner = FakeRunner(missing=["nginx"])
        profile = HostProfile(platform="linux", privileged=True)
        result = self.manager(runner).ensure_proxy_and_issuance_client(profile, ScriptedPrompts(confirms=[True]))
        self.assertEqual(result.kind, ErrorKind.TOOL_MISSING)
        self.assertIn("apt-get, yum, dnf", result.error)


if __name__ == "__main__":
    unittest.main()
