"""
Exit codes for the Pomoplan CLI.

Semantic exit codes so scripts wrapping the CLI can tell failures apart.
"""

# Success
SUCCESS = 0

# General error (unspecified)
ERROR_GENERAL = 1

# Invalid arguments, durations or other configuration
ERROR_INVALID_ARGS = 2

# Task not found
ERROR_NOT_FOUND = 5

# Task store could not be read or written
ERROR_PERSISTENCE = 7


def get_exit_code_name(code: int) -> str:
    """Get the name of an exit code for display purposes."""
    code_names = {
        SUCCESS: "SUCCESS",
        ERROR_GENERAL: "ERROR_GENERAL",
        ERROR_INVALID_ARGS: "ERROR_INVALID_ARGS",
        ERROR_NOT_FOUND: "ERROR_NOT_FOUND",
        ERROR_PERSISTENCE: "ERROR_PERSISTENCE",
    }
    return code_names.get(code, f"UNKNOWN({code})")


def get_exit_code_description(code: int) -> str:
    """Get a human-readable description of an exit code."""
    descriptions = {
        SUCCESS: "Command executed successfully",
        ERROR_GENERAL: "A general error occurred",
        ERROR_INVALID_ARGS: "Invalid arguments or configuration",
        ERROR_NOT_FOUND: "Task not found",
        ERROR_PERSISTENCE: "Task store could not be read or written",
    }
    return descriptions.get(code, "Unknown error")
