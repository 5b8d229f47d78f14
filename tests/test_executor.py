import pytest

from salvo.errors import SessionNotReady
from salvo.executor import (
    CommandExecutor,
    extract_output,
    escape_command,
    strip_text_colors,
    parse_template,
)
from salvo.models import CommandResult, CommandStatus
from salvo.session import ScriptedSession

SHOW_VERSION = (
    "show version\r\n"
    "Cisco IOS Software, C2960 Software, Version 15.0(2)SE11\r\n"
    "ROM: Bootstrap program is C2960 boot loader\r\n"
    "r1 uptime is 1 week, 2 days\r\n"
    "r1#"
)

SHOW_IP_INT_BRIEF_TEMPLATE = r"""Value INTF (\S+)
Value IPADDR (\S+)
Value STATUS (up|down|administratively down)
Value PROTO (up|down)

Start
  ^${INTF}\s+${IPADDR}\s+\w+\s+\w+\s+${STATUS}\s+${PROTO} -> Record
"""


def test_extract_output_drops_echo_blank_lines_and_prompt():
    captured = "show clock\r\n\r\n*12:00:01.123 UTC Mon Jan 3 2022\r\n\r\nr1#"
    assert extract_output(captured, sent="show clock") == "*12:00:01.123 UTC Mon Jan 3 2022"


def test_extract_output_long_command_echo():
    command = "show ip bgp neighbors 192.0.2.1 advertised-routes"
    captured = "{}\r\nNetwork          Next Hop\r\n*> 198.51.100.0/24 0.0.0.0\r\nr1#".format(command)
    assert extract_output(captured, sent=command) == "Network          Next Hop\n*> 198.51.100.0/24 0.0.0.0"


def test_extract_output_empty_response():
    assert extract_output("conf t\r\nr1(config)#", sent="conf t") == ""
    assert extract_output("", sent="show clock") == ""
    assert extract_output("r1#", sent="show clock") == ""


def test_extract_output_without_echo():
    assert extract_output("line one\r\nline two\r\nr1#", sent="show x") == "line one\nline two"


def test_extract_output_repeated_command_text_truncates():
    """Known limitation: output that repeats the command text is cut there"""
    captured = "show run | i hostname\r\nhostname show run | i hostname\r\nr1#"
    assert extract_output(captured, sent="show run | i hostname") == ""


def test_extract_output_strips_colors():
    captured = "ls\r\n\x1b[01;34mbin\x1b[0m  \x1b[01;34metc\x1b[0m\r\nadmin@h1:~$ "
    assert extract_output(captured, sent="ls") == "bin  etc"
    assert strip_text_colors("\x1b[1mbold\x1b[0m") == "bold"


def test_escape_command():
    assert escape_command("ls *.txt") == "ls \\*.txt"
    assert escape_command("show run", "*") == "show run"
    assert escape_command("a*b?", "*?") == "a\\*b\\?"


def test_scenario_show_version(router_config, ready_router):
    """Echo + three banner lines + prompt gives exactly the three lines"""
    session = ready_router(replies={"show version": SHOW_VERSION})
    result = CommandExecutor(config=router_config).execute(session, "show version")
    assert result.status == CommandStatus.OK
    assert result.output == (
        "Cisco IOS Software, C2960 Software, Version 15.0(2)SE11\n"
        "ROM: Bootstrap program is C2960 boot loader\n"
        "r1 uptime is 1 week, 2 days"
    )
    assert "show version" not in result.output
    assert result.host == "r1"
    assert result.parsed is None


def test_execute_is_idempotent(router_config, ready_router):
    session = ready_router(replies={"show version": SHOW_VERSION})
    executor = CommandExecutor(config=router_config)
    first = executor.execute(session, "show version")
    second = executor.execute(session, "show version")
    assert first == second
    assert session.sent == ["show version", "show version"]


@pytest.mark.parametrize(
    "command, device_output",
    [
        ("show clock", "12:00:01 UTC Mon Jan 3 2022"),
        ("show users", "    Line       User       Host(s)              Idle       Location\r\n*  1 vty 0     admin      idle                 00:00:00 192.0.2.9"),
        ("show ip route summary", "IP routing table name is default (0x0)\r\nconnected       0           2           0           136         408"),
    ],
)
def test_echo_never_leaks_into_output(router_config, ready_router, command, device_output):
    reply = "{0}\r\n{1}\r\nr1#".format(command, device_output)
    session = ready_router(replies={command: reply})
    result = CommandExecutor(config=router_config).execute(session, command)
    assert result.status == CommandStatus.OK
    assert command not in result.output


def test_execute_empty_response(router_config, ready_router):
    session = ready_router(replies={"terminal length 0": "terminal length 0\r\nr1#"})
    result = CommandExecutor(config=router_config).execute(session, "terminal length 0")
    assert result == CommandResult("r1", "terminal length 0", None, CommandStatus.EMPTY)


def test_execute_timeout(router_config, ready_router):
    session = ready_router()
    result = CommandExecutor(config=router_config).execute(session, "show tech-support")
    assert result.status == CommandStatus.TIMED_OUT
    assert result.output is None
    # A timeout leaves the session usable
    assert session.state == "READY"


def test_execute_disconnected(router_config, ready_router):
    session = ready_router(replies={"reload": ("reload\r\n", ScriptedSession.EOF)})
    result = CommandExecutor(config=router_config).execute(session, "reload")
    assert result.status == CommandStatus.DISCONNECTED
    assert session.state == "FAILED"
    assert "reload" in session.failure


def test_execute_requires_ready_session(router_config):
    session = ScriptedSession(host="r1")
    with pytest.raises(SessionNotReady):
        CommandExecutor(config=router_config).execute(session, "show clock")


def test_elevation_prefix_routes_end_to_enable(router_config, ready_router):
    """FIXME pinned: 'end' shares 'en' with 'enable' and is sent as 'enable'"""
    session = ready_router(replies={"enable": "enable\r\nPassword: ", "s3cret": "\r\nr1#"})
    result = CommandExecutor(config=router_config).execute(session, "end", password="s3cret")
    assert session.sent == ["enable", "s3cret"]
    assert "end" not in session.sent
    assert result.status == CommandStatus.EMPTY
    assert result.command == "end"


def test_unix_shell_does_not_route_en_prefix(unix_config):
    session = ScriptedSession(host="h1", replies={"env": "env\r\nHOME=/home/admin\r\nadmin@h1:~$ "})
    session._go_READY()
    result = CommandExecutor(config=unix_config).execute(session, "env")
    assert result.output == "HOME=/home/admin"
    assert session.sent == ["env"]


def test_wildcard_is_escaped_before_sending(unix_config):
    session = ScriptedSession(host="h1", replies={"ls \\*.txt": "ls \\*.txt\r\na.txt\r\nb.txt\r\nadmin@h1:~$ "})
    session._go_READY()
    result = CommandExecutor(config=unix_config).execute(session, "ls *.txt")
    assert session.sent == ["ls \\*.txt"]
    assert result.output == "a.txt\nb.txt"


def test_sudo_command_output(unix_config):
    session = ScriptedSession(
        host="h1",
        replies={
            "sudo whoami": "sudo whoami\r\n[sudo] password for admin: ",
            "s3cret": "\r\nroot\r\nadmin@h1:~$ ",
        },
    )
    session._go_READY()
    result = CommandExecutor(config=unix_config).execute(session, "sudo whoami", password="s3cret")
    assert result.status == CommandStatus.OK
    assert result.output.splitlines()[-1] == "root"


def test_template_parsing(router_config, ready_router):
    router_config.template = SHOW_IP_INT_BRIEF_TEMPLATE
    reply = (
        "show ip int brief\r\n"
        "Interface              IP-Address      OK? Method Status                Protocol\r\n"
        "GigabitEthernet0/0     192.0.2.1       YES NVRAM  up                    up\r\n"
        "GigabitEthernet0/1     unassigned      YES NVRAM  administratively down down\r\n"
        "r1#"
    )
    session = ready_router(replies={"show ip int brief": reply})
    result = CommandExecutor(config=router_config).execute(session, "show ip int brief")
    assert result.parsed == [
        {"INTF": "GigabitEthernet0/0", "IPADDR": "192.0.2.1", "STATUS": "up", "PROTO": "up"},
        {
            "INTF": "GigabitEthernet0/1",
            "IPADDR": "unassigned",
            "STATUS": "administratively down",
            "PROTO": "down",
        },
    ]


def test_parse_template_from_file(tmp_path):
    template = tmp_path / "clock.textfsm"
    template.write_text("Value TIME (\\S+)\n\nStart\n  ^${TIME} UTC -> Record\n")
    assert parse_template(str(template), "12:00:01 UTC Mon") == [{"TIME": "12:00:01"}]


def test_late_output_does_not_shift_results(router_config, late_device):
    session = late_device(
        host="r1",
        late={"show tech": "show tech\r\nTECH OUTPUT\r\nr1#"},
        replies={"show clock": "show clock\r\n12:00 UTC\r\nr1#"},
    )
    session._go_READY()
    executor = CommandExecutor(config=router_config)

    first = executor.execute(session, "show tech")
    assert first.status == CommandStatus.TIMED_OUT
    assert session.out_of_sync is True

    second = executor.execute(session, "show clock")
    assert second == CommandResult("r1", "show clock", "12:00 UTC", CommandStatus.OK)
    assert session.out_of_sync is False
    assert session.sent == ["show tech", "show clock"]


def test_resync_after_silent_timeout(router_config, ready_router):
    session = ready_router(replies={"show clock": "show clock\r\n12:00 UTC\r\nr1#"})
    executor = CommandExecutor(config=router_config)
    assert executor.execute(session, "show tech").status == CommandStatus.TIMED_OUT
    assert executor.execute(session, "show clock").output == "12:00 UTC"


def test_connection_lost_while_waiting_for_late_output(router_config, late_device):
    session = late_device(host="r1", late={"reload": ("reload\r\n", ScriptedSession.EOF)})
    session._go_READY()
    executor = CommandExecutor(config=router_config)

    assert executor.execute(session, "reload").status == CommandStatus.TIMED_OUT
    result = executor.execute(session, "show clock")
    assert result.status == CommandStatus.DISCONNECTED
    assert session.state == "FAILED"
    assert session.sent == ["reload"]


def test_elevation_connection_lost(router_config, ready_router):
    session = ready_router(replies={"enable": "enable\r\nPassword: ", "s3cret": ScriptedSession.EOF})
    result = CommandExecutor(config=router_config).execute(session, "enable", password="s3cret")
    assert result.status == CommandStatus.DISCONNECTED
    assert session.state == "FAILED"
