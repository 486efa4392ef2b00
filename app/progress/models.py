from dataclasses import dataclass


@dataclass(frozen=True)
class ProgressEvent:
    """One entry of a pipeline's progress log."""

    message: str
    step: int | None
    total: int | None
    timestamp: str

    def to_dict(self) -> dict[str, object]:
        return {
            "message": self.message,
            "step": self.step,
            "total": self.total,
            "timestamp": self.timestamp,
        }
