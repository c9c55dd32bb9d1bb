"""Catalog of known command-line agents."""

from pydantic import BaseModel


class AgentSignature(BaseModel, frozen=True):
    """Static metadata identifying a known agent by its command name."""

    command: str
    name: str
    short_name: str
    color: str
    package: str = ""  # Global npm package, only used to speed up discovery


DEFAULT_SIGNATURES: tuple[AgentSignature, ...] = (
    AgentSignature(
        command="claude",
        name="Claude Code",
        short_name="CC",
        color="#00FF64",
        package="@anthropic-ai/claude-code",
    ),
    AgentSignature(
        command="codex",
        name="Codex CLI",
        short_name="CX",
        color="#3B82F6",
        package="@openai/codex",
    ),
    AgentSignature(
        command="gemini",
        name="Gemini CLI",
        short_name="GM",
        color="#FFB800",
        package="@google/gemini-cli",
    ),
    AgentSignature(command="aider", name="Aider", short_name="AI", color="#9333EA"),
    AgentSignature(command="cody", name="Cody CLI", short_name="CD", color="#FF5733"),
    AgentSignature(command="continue", name="Continue", short_name="CN", color="#1389FD"),
    AgentSignature(command="cursor", name="Cursor Agent", short_name="CR", color="#7C3AED"),
    AgentSignature(command="amp", name="Amp", short_name="AM", color="#F59E0B"),
)

