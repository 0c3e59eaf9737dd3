class GoRocketError(Exception):
    pass


class ConfigError(GoRocketError):
    pass


class ProjectError(GoRocketError):
    pass


class CommandError(GoRocketError):
    def __init__(
        self,
        message: str,
        command: list[str] | None = None,
        returncode: int | None = None,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.command = command or []
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


class BuildError(GoRocketError):
    pass


class ArchiveError(GoRocketError):
    pass


class FormulaError(GoRocketError):
    pass


class ChecksumError(FormulaError):
    pass


class RepositoryError(GoRocketError):
    pass


class RemoteAPIError(GoRocketError):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ReleaseError(GoRocketError):
    pass
