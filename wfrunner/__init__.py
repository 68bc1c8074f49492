"""Building blocks for running CI workflow jobs locally."""

__version__ = "0.1.0"

__all__ = [
    "actions",
    "config",
    "expression",
    "job_executor",
    "logger",
    "naming",
    "plan",
    "run_context",
    "steps",
]