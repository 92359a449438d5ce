"""Error types for rubric evaluation."""


class EvaluationError(Exception):
    """A single rubric item could not be evaluated."""


class DiagnosisCancelledError(Exception):
    """The caller abandoned the diagnosis before it finished."""


class RubricRowInvalid(Exception):  # noqa: N818
    """A rubric row is structurally unusable (e.g. blank selector).

    Attributes:
        item_id: Id of the offending rubric item.
    """

    def __init__(self, item_id: str, reason: str) -> None:
        super().__init__(f"Rubric item '{item_id}' is unusable: {reason}")
        self.item_id = item_id
        self.reason = reason
