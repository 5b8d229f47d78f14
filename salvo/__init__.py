from salvo.config import RunConfig, Platform, TransportKind, HostKeyPolicy
from salvo.errors import (
    SalvoError,
    TransportUnavailable,
    SpawnFailure,
    AuthenticationFailure,
    SessionNotReady,
    SessionClosed,
    EndOfStream,
)
from salvo.prompts import PromptCatalog, PromptMatcher, PromptEvent, PromptMatch, CATALOG
from salvo.session import RemoteSession, PexpectSession, ScriptedSession, SessionSpawner
from salvo.transport import TransportProber
from salvo.auth import AuthenticationStateMachine
from salvo.models import Command, CommandResult, CommandStatus, HostOutcome
from salvo.executor import CommandExecutor, extract_output
from salvo.eventlog import JsonEventLog
from salvo.orchestrator import SessionOrchestrator

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

__version__ = "0.1.0"

__all__ = [
    "RunConfig",
    "Platform",
    "TransportKind",
    "HostKeyPolicy",
    "SalvoError",
    "TransportUnavailable",
    "SpawnFailure",
    "AuthenticationFailure",
    "SessionNotReady",
    "SessionClosed",
    "EndOfStream",
    "PromptCatalog",
    "PromptMatcher",
    "PromptEvent",
    "PromptMatch",
    "CATALOG",
    "RemoteSession",
    "PexpectSession",
    "ScriptedSession",
    "SessionSpawner",
    "TransportProber",
    "AuthenticationStateMachine",
    "Command",
    "CommandResult",
    "CommandStatus",
    "HostOutcome",
    "CommandExecutor",
    "extract_output",
    "JsonEventLog",
    "SessionOrchestrator",
]
