import pytest

from salvo.auth import AuthenticationStateMachine
from salvo.errors import SessionClosed
from salvo.prompts import PromptEvent
from salvo.session import ScriptedSession


def test_login_success(router_config):
    session = ScriptedSession(host="r1", greeting="Password: ", script=["\r\nr1>"])
    auth = AuthenticationStateMachine(config=router_config)
    assert auth.login(session, "s3cret") is True
    assert session.sent == ["s3cret"]
    assert session.state == "READY"


def test_login_answers_repeated_password_prompts(router_config):
    """Some devices ask twice, e.g. a RADIUS fallback to local accounts"""
    session = ScriptedSession(
        host="r1", greeting="Password: ", script=["\r\nPassword: ", "\r\nr1#"]
    )
    auth = AuthenticationStateMachine(config=router_config)
    assert auth.login(session, "s3cret") is True
    assert session.sent == ["s3cret", "s3cret"]


def test_login_without_password_prompt(router_config):
    session = ScriptedSession(host="r1", greeting="Welcome\r\nr1>")
    auth = AuthenticationStateMachine(config=router_config)
    assert auth.login(session, "s3cret") is True
    assert session.sent == []


@pytest.mark.parametrize("password", ["", "s3cret", "wrong", "p@ss word"])
def test_eof_after_password_prompt_is_credential_failure(router_config, password):
    session = ScriptedSession(
        host="r1",
        greeting="Password: ",
        script=[("\r\n% Authentication failed\r\n", ScriptedSession.EOF)],
    )
    auth = AuthenticationStateMachine(config=router_config)
    assert auth.login(session, password) is False
    assert session.state == "FAILED"
    assert "after the password" in session.failure


def test_eof_before_any_prompt_is_a_failure(router_config):
    session = ScriptedSession(host="r1", greeting=("Connection refused\r\n", ScriptedSession.EOF))
    auth = AuthenticationStateMachine(config=router_config)
    assert auth.login(session, "s3cret") is False
    assert "before any login prompt" in session.failure
    assert session.offered_algorithms == {}


def test_silent_hang_is_a_failure(router_config):
    session = ScriptedSession(host="r1", greeting="Password: ")
    auth = AuthenticationStateMachine(config=router_config)
    assert auth.login(session, "s3cret") is False
    assert "timed out" in session.failure
    assert session.state == "FAILED"


def test_password_prompt_cap(router_config):
    router_config.max_password_attempts = 2
    session = ScriptedSession(
        host="r1", greeting="Password: ", script=["\r\nPassword: ", "\r\nPassword: "]
    )
    auth = AuthenticationStateMachine(config=router_config)
    assert auth.login(session, "wrong") is False
    assert session.sent == ["wrong", "wrong"]
    assert "rejected 2 times" in session.failure


def test_negotiation_failure_records_offer(router_config):
    session = ScriptedSession(
        host="r1",
        greeting=(
            "Unable to negotiate with 172.16.1.3 port 22: no matching cipher found. "
            "Their offer: aes128-cbc,3des-cbc\r\n",
            ScriptedSession.EOF,
        ),
    )
    auth = AuthenticationStateMachine(config=router_config)
    assert auth.login(session, "s3cret") is False
    assert session.offered_algorithms == {"ciphers": "aes128-cbc,3des-cbc"}
    assert "negotiation" in session.failure


def test_enable_sends_keyword_and_password(router_config, ready_router):
    session = ready_router(replies={"enable": "enable\r\nPassword: ", "s3cret": "\r\nr1#"})
    auth = AuthenticationStateMachine(config=router_config)
    assert auth.enable(session, "s3cret") is None
    assert session.sent == ["enable", "s3cret"]
    assert session.state == "READY"


def test_enable_does_not_classify_eof(router_config, ready_router):
    session = ready_router(replies={"enable": ("enable\r\nPassword: ",), "s3cret": ScriptedSession.EOF})
    auth = AuthenticationStateMachine(config=router_config)
    assert auth.enable(session, "s3cret") is None
    # Not a login failure, but the dead stream is not used again
    assert session.state == "FAILED"
    assert "enable" in session.failure
    with pytest.raises(SessionClosed):
        session.sendline("show clock")
    assert session.sent == ["enable", "s3cret"]


def test_enable_without_confirmation_keeps_session(router_config, ready_router):
    session = ready_router(replies={"enable": "enable\r\n% Invalid input\r\n"})
    auth = AuthenticationStateMachine(config=router_config)
    assert auth.enable(session, "s3cret") is None
    assert session.state == "READY"
    assert session.failure == ""


def test_sudo_answers_password_prompt(unix_config):
    session = ScriptedSession(
        host="h1",
        replies={
            "sudo whoami": "sudo whoami\r\n[sudo] password for admin: ",
            "s3cret": "\r\nroot\r\nadmin@h1:~$ ",
        },
    )
    session._go_READY()
    auth = AuthenticationStateMachine(config=unix_config)
    match = auth.sudo(session, "sudo whoami", "s3cret")
    assert match.event == PromptEvent.READY_PROMPT
    assert "sudo whoami" in match.before
    assert "root" in match.before
    assert session.sent == ["sudo whoami", "s3cret"]


def test_sudo_without_password_prompt(unix_config):
    session = ScriptedSession(host="h1", replies={"sudo id": "sudo id\r\nuid=0(root)\r\nadmin@h1:~$ "})
    session._go_READY()
    auth = AuthenticationStateMachine(config=unix_config)
    match = auth.sudo(session, "sudo id", "s3cret")
    assert match.event == PromptEvent.READY_PROMPT
    assert session.sent == ["sudo id"]
