import pathlib
import tempfile
import unittest

from notifyd_installer.errors import TemplateNotFoundError
from notifyd_installer.system.services import (
    UserServiceManager,
    render_template,
    substitute_placeholder,
)


class TestSubstitutePlaceholder(unittest.TestCase):
    def test_user_line(self):
        out, count = substitute_placeholder(b"User=USER_NAME\n", "USER_NAME", "alice")
        self.assertEqual(out, b"User=alice\n")
        self.assertEqual(count, 1)

    def test_every_occurrence_and_nothing_else(self):
        src = b"a USER_NAME b\tUSER_NAMEUSER_NAME\r\n\xe2\x9c\x93 end"
        out, count = substitute_placeholder(src, "USER_NAME", "bob")
        self.assertEqual(count, 3)
        self.assertEqual(out, b"a bob b\tbobbob\r\n\xe2\x9c\x93 end")
        self.assertEqual(out.split(b"bob"), src.split(b"USER_NAME"))

    def test_no_placeholder_is_unchanged(self):
        out, count = substitute_placeholder(b"User=alice\n", "USER_NAME", "carol")
        self.assertEqual(out, b"User=alice\n")
        self.assertEqual(count, 0)


class TestRenderTemplate(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = pathlib.Path(self.tmp.name) / "unit.service"

    def tearDown(self):
        self.tmp.cleanup()

    def test_rewrites_in_place(self):
        self.path.write_text("[Service]\nUser=USER_NAME\n")
        self.assertEqual(render_template(self.path, "USER_NAME", "alice"), 1)
        self.assertEqual(self.path.read_text(), "[Service]\nUser=alice\n")

    def test_second_render_is_noop(self):
        self.path.write_text("User=USER_NAME\n")
        render_template(self.path, "USER_NAME", "alice")
        first = self.path.read_bytes()
        self.assertEqual(render_template(self.path, "USER_NAME", "alice"), 0)
        self.assertEqual(self.path.read_bytes(), first)

    def test_missing_template(self):
        with self.assertRaises(TemplateNotFoundError) as ctx:
            render_template(self.path, "USER_NAME", "alice")
        self.assertIsInstance(ctx.exception, FileNotFoundError)
        self.assertEqual(ctx.exception.returncode, 1)


class TestUserServiceManager(unittest.TestCase):
    def test_plain_command(self):
        self.assertEqual(
            UserServiceManager().command("enable", "--now", "x.service"),
            ["systemctl", "--user", "enable", "--now", "x.service"],
        )

    def test_sudo_command(self):
        mgr = UserServiceManager(sudo=True, sudo_noninteractive=True)
        self.assertEqual(
            mgr.command("daemon-reload"),
            ["sudo", "-n", "systemctl", "--user", "daemon-reload"],
        )


if __name__ == "__main__":
    unittest.main()
