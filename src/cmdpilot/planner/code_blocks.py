"""Fenced code block scanning and shell command extraction."""

from __future__ import annotations

import re

from pydantic import BaseModel

SHELL_LANGUAGES = frozenset({
    "bash", "sh", "shell", "zsh", "cmd", "powershell", "terminal", "",
})

_FENCE_RE = re.compile(r"```([\w.+-]*)[^\S\n]*\n(.*?)```", re.DOTALL)
_PROMPT_MARKER_RE = re.compile(r"^[>$]\s*")

COMMAND_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p)
    for p in (
        r"^(npm|yarn|pnpm|npx)\s+",
        r"^(pip|pip3|python|python3)\s+",
        r"^pytest(?:\s+|$)",
        r"^(cargo|rustc)\s+",
        r"^(go|gofmt)\s+",
        r"^(gradle|\./gradlew|gradlew)\s+",
        r"^(mvn|maven)\s+",
        r"^(dotnet)\s+",
        r"^(flutter|dart)\s+",
        r"^(swift|xcodebuild)\s+",
        r"^(git)\s+",
        r"^(cd|ls|dir|cat|echo|mkdir|rm|cp|mv|touch)\s+",
        r"^(chmod|chown)\s+",
        r"^(curl|wget)\s+",
        r"^(docker|docker-compose)\s+",
        r"^(kubectl|helm)\s+",
        r"^(aws|gcloud|az)\s+",
    )
)


class CodeBlock(BaseModel):
    language: str
    code: str


def parse_code_blocks(text: str) -> list[CodeBlock]:
    return [
        CodeBlock(language=m.group(1), code=m.group(2).strip())
        for m in _FENCE_RE.finditer(text)
    ]


def is_shell_block(block: CodeBlock) -> bool:
    return block.language.lower() in SHELL_LANGUAGES


def extract_commands(code: str) -> list[str]:
    commands: list[str] = []
    for line in code.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith(("#", "//")):
            continue

        # Prompt echo: "$ npm test" or "> npm test"
        if stripped.startswith(("$", ">")):
            command = _PROMPT_MARKER_RE.sub("", stripped)
            if command:
                commands.append(command)
            continue

        if any(pattern.match(stripped) for pattern in COMMAND_PATTERNS):
            commands.append(stripped)
    return commands
