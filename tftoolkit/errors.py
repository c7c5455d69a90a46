"""
tftoolkit Errors

Exception hierarchy shared by the plan summary, cost summary and tool wrappers.
"""


class ToolkitError(ValueError):
    """Base class for all tftoolkit errors"""


class PlanFileNotFoundError(ToolkitError):
    """No plan file was given, or the given path does not exist"""

    def __init__(self, plan_file: str = ""):
        self.plan_file = plan_file
        if plan_file:
            message = f"Plan file not found: {plan_file}"
        else:
            message = "No plan file specified."
        super().__init__(message)


class PlanParseError(ToolkitError):
    """The plan document is not valid JSON or is structurally invalid"""


class CostParseError(ToolkitError):
    """The infracost breakdown document could not be parsed"""


class ConfigurationError(ToolkitError):
    """The configuration file is missing or invalid"""


class ToolNotFoundError(ToolkitError):
    """A required external binary is not on PATH"""

    def __init__(self, tool: str, hint: str = ""):
        self.tool = tool
        message = f"'{tool}' not found in PATH."
        if hint:
            message = f"{message} {hint}"
        super().__init__(message)
