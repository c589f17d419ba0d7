"""Error types raised while compiling compliance data."""


class ComplianceDataError(Exception):
    """Compliance data is invalid and the current compilation must stop."""


class ConfinementError(ComplianceDataError):
    """An entry carries a ``confine`` block that cannot be evaluated."""


class MissingValueError(ComplianceDataError):
    """A check names a parameter but assigns no value to it."""

    def __init__(self, check_name: str, parameter: str, location: str = "unknown"):
        self.check_name = check_name
        self.parameter = parameter
        self.location = location
        super().__init__(
            f"'{check_name}' has parameter '{parameter}' in '{location}' "
            "but has no assigned value"
        )


class ParameterMergeError(ComplianceDataError):
    """Two specifications for one parameter could not be merged."""

    def __init__(self, parameter: str, field: str = "value", mismatch: bool = True):
        self.parameter = parameter
        self.field = field
        self.mismatch = mismatch
        if field == "value":
            message = (
                f"Value type mismatch for {parameter}"
                if mismatch
                else f"Merge failed for values in {parameter}"
            )
        else:
            message = (
                f"Type mismatch for {field} in {parameter}"
                if mismatch
                else f"Merge failed for {field} in {parameter}"
            )
        super().__init__(message)


class InvalidVersionError(ValueError):
    """A version or version range string could not be parsed."""
