"""Default rule tables for the safety policy.

Patterns are plain lower-case strings. Trusted and confirm patterns match as
prefixes of the normalized command; forbidden patterns match anywhere in it.
Forbidden patterns with a leading space only match at the start of a word.
Order matters: the first matching pattern is the one reported in a verdict.
"""

from __future__ import annotations

DEFAULT_TRUSTED_PATTERNS: tuple[str, ...] = (
    # Package managers (read operations)
    "npm list", "npm ls", "npm view", "npm info", "npm outdated", "npm audit",
    "yarn list", "yarn info", "yarn why", "yarn outdated",
    "pnpm list", "pnpm ls", "pnpm why", "pnpm outdated",
    "pip list", "pip show", "pip freeze",
    "cargo tree", "cargo metadata",
    # Build, test and run
    "npm run build", "npm run dev", "npm run start", "npm run test", "npm test",
    "yarn build", "yarn dev", "yarn start", "yarn test",
    "pnpm build", "pnpm dev", "pnpm start", "pnpm test",
    "gradle build", "gradle test", "gradle assemble",
    "./gradlew build", "./gradlew test", "./gradlew assemble",
    "mvn compile", "mvn test", "mvn package",
    "cargo build", "cargo test", "cargo run",
    "go build", "go test", "go run",
    "dotnet build", "dotnet test", "dotnet run",
    "flutter build", "flutter test", "flutter run",
    "xcodebuild", "swift build", "swift test",
    "pytest", "python -m pytest", "python3 -m pytest",
    # VCS (read operations)
    "git status", "git log", "git diff", "git branch", "git remote",
    "git show", "git blame", "git stash list",
    # Filesystem (read operations)
    "ls", "dir", "cat", "head", "tail", "less", "more",
    "find", "grep", "rg", "ag", "fd",
    "tree", "pwd", "which", "where", "type",
    # Version and environment queries
    "node -v", "node --version", "npm -v", "yarn -v", "pnpm -v",
    "python --version", "python3 --version", "pip --version",
    "java -version", "javac -version",
    "go version", "cargo --version", "rustc --version",
    "dotnet --version", "flutter --version", "dart --version",
    "xcode-select -p", "xcodebuild -version",
    "echo", "env", "printenv",
    # Linters and formatters in check mode
    "eslint", "prettier", "tsc --noemit", "tsc -b",
    "pylint", "flake8", "black --check", "mypy", "ruff check",
    "cargo clippy", "cargo fmt --check",
    "go fmt", "gofmt", "golint",
)

DEFAULT_FORBIDDEN_PATTERNS: tuple[str, ...] = (
    # Destructive filesystem operations
    "rm -rf /", "rm -rf ~", "rm -rf *", "rm -fr /",
    "del /s /q", "rmdir /s /q",
    "format c:", "fdisk", "mkfs", "dd if=",
    # Privilege escalation and system state
    "sudo", "su -", "su root", " su postgres", " su admin",
    "chmod 777", "chown",
    "shutdown", "reboot", "halt",
    "systemctl", "service ",
    # Network to shell
    "curl | sh", "wget | sh", "curl | bash", "wget | bash",
    "| /bin/sh", "| /bin/bash",
    "netcat", "ncat ", " nc -e", " nc -c", " nc -l", "nmap",
    # Database mutation
    "drop database", "drop table", "truncate table",
    "delete from", "insert into", "alter table",
    "'update ", "\"update ", "'truncate ", "\"truncate ",
    # Destructive VCS operations
    "git push --force", "git push -f",
    "git reset --hard", "git clean -fd",
    "git rebase", "git merge",
    # Package publishing
    "npm publish", "yarn publish", "pnpm publish",
    "pip upload", "twine upload", "cargo publish",
    # Shell profile and environment mutation
    "export ", "setx ",
    ".bashrc", ".zshrc", ".bash_profile", ".profile",
)

DEFAULT_CONFIRM_PATTERNS: tuple[str, ...] = (
    # Dependency installation
    "npm install", "npm i ", "npm ci", "yarn add", "yarn install",
    "pnpm add", "pnpm install", "pip install", "pip3 install",
    "cargo add", "go get",
    # Commit, push and pull
    "git commit", "git push", "git pull",
    # File move, copy and delete
    "rm", "del", "rmdir",
    "mv", "move", "rename",
    "cp", "copy",
)

DEFAULT_SENSITIVE_PATH_PATTERNS: tuple[str, ...] = (
    ".env", ".env.local", ".env.production",
    "credentials", "secrets", "password",
    ".ssh", ".aws", ".gcloud", ".kube", ".docker/config.json",
    "id_rsa", "id_ed25519",
    ".netrc", ".pgpass", ".npmrc", ".pypirc",
)
