from rich import print as rich_print
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from salvo.models import CommandStatus

r"""
salvo - Python ssh automation
Copyright (C) 2022      David Michael Pennington

Redistribution and use in source and binary forms, with or without
modification, are permitted provided that the following conditions are
met:

1.  Redistributions of source code must retain the above copyright
    notice, this list of conditions and the following disclaimer.

2.  Redistributions in binary form must reproduce the above copyright
    notice, this list of conditions and the following disclaimer in the
    documentation and/or other materials provided with the distribution.

3.  Neither the name of the copyright holder nor the names of its
    contributors may be used to endorse or promote products derived from
    this software without specific prior written permission.

THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS
"AS IS" AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT
LIMITED TO, THE IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A
PARTICULAR PURPOSE ARE DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT
HOLDER OR CONTRIBUTORS BE LIABLE FOR ANY DIRECT, INDIRECT, INCIDENTAL,
SPECIAL, EXEMPLARY, OR CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT LIMITED
TO, PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA, OR
PROFITS; OR BUSINESS INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF
LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING
NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE OF THIS
SOFTWARE, EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.
"""

NO_OUTPUT = {
    CommandStatus.EMPTY: "[yellow](no output)[/yellow]",
    CommandStatus.TIMED_OUT: "[bold red](no output: timed out)[/bold red]",
    CommandStatus.DISCONNECTED: "[bold red](no output: connection lost)[/bold red]",
}


def render_outcome(outcome):
    """Print one host's reachability, login result and command output"""
    rich_print("")
    rich_print("[bold cyan]==== {} ====[/bold cyan]".format(escape(outcome.host)))

    if not outcome.reached:
        rich_print("[bold red]not reachable: {}[/bold red]".format(escape(str(outcome.error))))
        return None

    if not outcome.authenticated:
        rich_print("[bold red]login failed: {}[/bold red]".format(escape(str(outcome.error))))
        if outcome.diagnosis:
            rich_print("[bold yellow]{}[/bold yellow]".format(outcome.diagnosis))
        return None

    rich_print("[bold green]logged in over {}[/bold green]".format(outcome.transport))
    for result in outcome.results:
        rich_print("[bold blue]>>> {}[/bold blue]".format(escape(result.command)))
        if result.status == CommandStatus.OK:
            rich_print(escape(result.output))
        else:
            rich_print(NO_OUTPUT[result.status])

        if result.parsed:
            for row in result.parsed:
                rich_print("    [bold yellow]{}[/bold yellow]".format(escape(repr(row))))

    if outcome.error is not None:
        rich_print("[bold red]stopped early: {}[/bold red]".format(escape(str(outcome.error))))


def render_summary(outcomes, console=None):
    console = console or Console()
    table = Table(title="salvo run summary")
    table.add_column("host")
    table.add_column("transport")
    table.add_column("login")
    table.add_column("ok", justify="right")
    table.add_column("failed", justify="right")

    for outcome in outcomes:
        if not outcome.reached:
            login = "[red]unreachable[/red]"
        elif outcome.authenticated:
            login = "[green]ok[/green]"
        else:
            login = "[red]failed[/red]"
        ok = len([ii for ii in outcome.results if ii.status in (CommandStatus.OK, CommandStatus.EMPTY)])
        table.add_row(
            escape(outcome.host),
            str(outcome.transport),
            login,
            str(ok),
            str(len(outcome.results) - ok),
        )
    console.print(table)
    return table
