from getpass import getpass, getuser
import argparse
import sys
import os

from loguru import logger
from traits.api import TraitError

from salvo.config import RunConfig, Platform, HostKeyPolicy
from salvo.orchestrator import SessionOrchestrator
from salvo.report import render_outcome, render_summary

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


def load_hosts(path=""):
    """Read one host per line; trailing whitespace trimmed, blank lines skipped"""
    with open(os.path.expanduser(path), "r", encoding="utf-8") as fh:
        return [line.rstrip() for line in fh.read().splitlines() if line.strip() != ""]


def load_commands(command="", command_file=""):
    if command_file != "":
        with open(os.path.expanduser(command_file), "r", encoding="utf-8") as fh:
            return [line.rstrip() for line in fh.read().splitlines() if line.strip() != ""]
    if command.strip() != "":
        return [command.strip()]
    return []


def confirm(hosts, commands, answer=None):
    """Ask before touching any device; `answer` is for non-interactive callers"""
    if answer is None:
        answer = input(
            "Run {} command(s) on {} host(s)? [y/N] ".format(len(commands), len(hosts))
        )
    return answer.strip().lower() in ("y", "yes")


def build_parser():
    parser = argparse.ArgumentParser(
        prog="salvo",
        description="Run commands on a list of routers, switches or unix hosts over ssh or telnet",
    )
    parser.add_argument("hosts", help="file with one hostname or address per line")
    parser.add_argument("-c", "--command", default="", help="single command to run")
    parser.add_argument("-f", "--command-file", default="", help="file with one command per line")
    parser.add_argument(
        "-p", "--platform", default=Platform.ROUTER_CLI,
        help="router_cli (default) or unix_shell; prefixes are accepted",
    )
    parser.add_argument("-u", "--username", default=getuser(), help="login username")
    parser.add_argument("--ssh-key", default="", help="ssh private key instead of password auth")
    parser.add_argument(
        "--host-key-policy", default=HostKeyPolicy.WARN,
        help="warn (default), strict or disable",
    )
    parser.add_argument("--command-timeout", type=float, default=30.0)
    parser.add_argument("--login-timeout", type=float, default=10.0)
    parser.add_argument("--template", default="", help="TextFSM template applied to each output")
    parser.add_argument("--log-file", default="", help="append a raw session transcript here")
    parser.add_argument("--log-screen", action="store_true", help="echo the raw session to stdout")
    parser.add_argument("--json-log", default="", help="append JSON session events here")
    parser.add_argument("-y", "--yes", action="store_true", help="do not ask for confirmation")
    parser.add_argument("-v", "--verbose", action="store_true")
    parser.add_argument("--debug", action="store_true")
    return parser


def configure_logging(verbose=False, debug=False):
    logger.remove()
    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    else:
        level = "WARNING"
    return logger.add(sys.stderr, level=level)


@logger.catch(onerror=lambda _: sys.exit(1))
def main(argv=None):
    args = build_parser().parse_args(argv)
    configure_logging(verbose=args.verbose, debug=args.debug)

    try:
        config = RunConfig(
            platform=args.platform,
            command_file=args.command_file,
            host_key_policy=args.host_key_policy,
            ssh_key=args.ssh_key,
            command_timeout=args.command_timeout,
            login_timeout=args.login_timeout,
            template=args.template,
            log_file=args.log_file,
            log_screen=args.log_screen,
            json_logfile=args.json_log,
            debug=int(args.debug),
        )
    except (TraitError, ValueError) as ee:
        logger.error("invalid option: {}".format(ee))
        return 1

    try:
        hosts = load_hosts(args.hosts)
        commands = load_commands(args.command, config.command_file)
    except OSError as ee:
        logger.error("cannot read input: {}".format(ee))
        return 1

    if len(hosts) == 0:
        logger.error("no hosts in {}".format(args.hosts))
        return 1
    if len(commands) == 0:
        logger.error("no commands given; use --command or --command-file")
        return 1

    password = getpass("Password for {}: ".format(args.username))

    if not args.yes and not confirm(hosts, commands):
        logger.warning("aborted by user")
        return 1

    orchestrator = SessionOrchestrator(config=config)
    outcomes = list()
    for outcome in orchestrator.iter_outcomes(hosts, commands, args.username, password):
        render_outcome(outcome)
        outcomes.append(outcome)
    render_summary(outcomes)
    orchestrator.eventlog.close()
    return 0
