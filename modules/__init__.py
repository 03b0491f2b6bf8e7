"""Star Line Mode protocol modules for the TUP900 printer agent."""

__all__ = [
    "job_encoder",
    "star_commands",
    "status_decoder",
]
