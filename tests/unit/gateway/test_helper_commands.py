"""Tests for ``gh`` and clipboard helper invocations."""

from __future__ import annotations

import subprocess
import unittest
from unittest import mock

from lazyhub.gateway import helper
from lazyhub.gateway.helper import HelperError


class HelperCommandTests(unittest.TestCase):
    def test_checkout_runs_gh_with_repo(self) -> None:
        completed = mock.Mock(returncode=0, stdout="", stderr="")
        with mock.patch("lazyhub.gateway.helper.subprocess.run", return_value=completed) as run:
            helper.checkout_pr("acme/widgets", 5)

        self.assertEqual(run.call_args.args[0], ["gh", "pr", "checkout", "5", "--repo", "acme/widgets"])

    def test_nonzero_exit_raises_with_stderr(self) -> None:
        completed = mock.Mock(returncode=1, stdout="", stderr="could not resolve to a PullRequest\n")
        with mock.patch("lazyhub.gateway.helper.subprocess.run", return_value=completed):
            with self.assertRaises(HelperError) as ctx:
                helper.open_pr_in_browser("acme/widgets", 5)

        self.assertEqual(str(ctx.exception), "could not resolve to a PullRequest")

    def test_missing_binary_raises(self) -> None:
        with mock.patch("lazyhub.gateway.helper.subprocess.run", side_effect=FileNotFoundError("gh")):
            with self.assertRaises(HelperError) as ctx:
                helper.open_pr_create("acme/widgets")

        self.assertEqual(str(ctx.exception), "gh is not installed")

    def test_timeout_raises(self) -> None:
        with mock.patch(
            "lazyhub.gateway.helper.subprocess.run",
            side_effect=subprocess.TimeoutExpired(["gh"], 120),
        ):
            with self.assertRaises(HelperError):
                helper.checkout_pr("acme/widgets", 5)

    def test_clipboard_command_per_platform(self) -> None:
        with mock.patch("lazyhub.gateway.helper.shutil.which", side_effect=lambda name: f"/bin/{name}"):
            self.assertEqual(helper.clipboard_command("darwin"), ["pbcopy"])
            self.assertEqual(helper.clipboard_command("win32"), ["clip"])
            self.assertEqual(helper.clipboard_command("linux"), ["wl-copy"])

    def test_clipboard_falls_back_to_xclip(self) -> None:
        with mock.patch(
            "lazyhub.gateway.helper.shutil.which",
            side_effect=lambda name: "/usr/bin/xclip" if name == "xclip" else None,
        ):
            self.assertEqual(helper.clipboard_command("linux"), ["xclip", "-selection", "clipboard"])

    def test_copy_without_tool_raises(self) -> None:
        with mock.patch("lazyhub.gateway.helper.shutil.which", return_value=None):
            with self.assertRaises(HelperError):
                helper.copy_to_clipboard("text")

    def test_copy_pipes_text_to_stdin(self) -> None:
        completed = mock.Mock(returncode=0, stdout="", stderr="")
        with mock.patch(
            "lazyhub.gateway.helper.clipboard_command", return_value=["pbcopy"]
        ), mock.patch("lazyhub.gateway.helper.subprocess.run", return_value=completed) as run:
            helper.copy_to_clipboard("feature-5")

        self.assertEqual(run.call_args.kwargs["input"], "feature-5")


if __name__ == "__main__":
    unittest.main()
