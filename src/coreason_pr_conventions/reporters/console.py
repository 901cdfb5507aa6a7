# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_pr_conventions

from typing import Optional

from rich.console import Console
from rich.markup import escape

from coreason_pr_conventions.domain.models import RuleMessage, ValidationResult

PASS_ICON = "✅"
FAIL_ICON = "❌"


class ConsoleReporter:
    """
    Prints one line per rule group, failures followed by indented details.
    """

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console(highlight=False, soft_wrap=True, emoji=False)

    def render_message(self, message: RuleMessage) -> None:
        if message.passed:
            self.console.print(f"{PASS_ICON} [green]{escape(message.text)}[/green]")
            return

        self.console.print(f"{FAIL_ICON} [red]{escape(message.text)}[/red]")
        for detail in message.details:
            for line in detail.splitlines() or [""]:
                self.console.print(f"   {escape(line)}")

    def render(self, result: ValidationResult) -> None:
        for message in result.messages:
            self.render_message(message)

        if result.passed:
            self.console.print(f"\n[bold green]All {len(result.messages)} convention checks passed[/bold green]")
        else:
            failed = ", ".join(message.check for message in result.failures)
            self.console.print(
                f"\n[bold red]{len(result.failures)} of {len(result.messages)} convention checks failed:"
                f"[/bold red] {escape(failed)}"
            )

    def render_error(
        self,
        error: Exception,
        headline: str = "Could not collect pull request metadata",
        hint: str = "Please re-run the job.",
    ) -> None:
        """
        Reports an operational failure, which is not a convention violation.
        """
        self.console.print(f"{FAIL_ICON} [bold red]{escape(headline)}[/bold red]")
        self.console.print(f"   {escape(str(error))}")
        self.console.print(f"   This is an infrastructure error, not a convention violation. {escape(hint)}")
